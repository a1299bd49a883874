"""Question answering through the hosted assistant.

One call walks a question through thread reuse or creation, message posting
and a streamed run, returning whatever answer the stream yields.
"""

import logging

from ..models.course import AiAnswerRequest, AiAnswerResponse
from .assistant_client import AssistantClient, consume_answer

logger = logging.getLogger(__name__)


class ConversationalQueryService:
    def __init__(self, client: AssistantClient, assistant_id: str):
        self.client = client
        self.assistant_id = assistant_id

    async def answer(self, request: AiAnswerRequest) -> AiAnswerResponse:
        thread_id = (request.threadId or "").strip()
        if not thread_id:
            thread_id = await self.client.create_thread()

        await self.client.post_message(
            thread_id, request.question, request.organizationIds
        )

        async with self.client.start_run(thread_id, self.assistant_id) as stream:
            answer = await consume_answer(stream.aiter_lines())

        logger.info(
            "Answered question for user %s on thread %s", request.userId, thread_id
        )
        return AiAnswerResponse(answer=answer, threadId=thread_id)
