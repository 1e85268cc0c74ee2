from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.services.ai_context import ConversationContext, build_conversation_context
from app.services.command_dispatcher import CommandDispatcher
from app.services.command_extractor import extract_commands, is_pure_json
from app.services.ollama_service import OllamaClient
from app.utils.logger import ai_logger


async def assemble_reply(db: AsyncSession, context: ConversationContext, ai_text: str) -> str:
    """
    Turn the model's reply into the text sent back to the user.

    Commands found in the reply are executed and their result lines joined.
    Without commands the reply is returned as is, except that a reply made of
    nothing but a JSON literal is suppressed.
    """
    commands = extract_commands(ai_text)
    if commands:
        ai_logger.info(f"Extracted {len(commands)} command(s) from model reply")
        dispatcher = CommandDispatcher(db, context)
        results = await dispatcher.dispatch_all(commands)
        return "\n".join(results)

    if is_pure_json(ai_text):
        return ""
    return ai_text


async def handle_chat_message(db: AsyncSession, user: User, message: str, client: OllamaClient) -> str:
    context = await build_conversation_context(db, user)
    messages = [
        {"role": "system", "content": context.system_prompt},
        {"role": "user", "content": message},
    ]
    ai_text = await client.chat(messages)
    return await assemble_reply(db, context, ai_text)
