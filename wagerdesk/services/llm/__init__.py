from wagerdesk.services.llm.chat_client import ChatCompletionClient, get_chat_client

__all__ = ["ChatCompletionClient", "get_chat_client"]
