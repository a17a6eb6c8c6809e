"""
Chat Service — AI-powered fallback assistant for free-form questions using Gemini.
"""
import asyncio

import google.generativeai as genai

from intakebot.config import get_settings
from intakebot.utils.logger import log

UNAVAILABLE_TEXT = "（系統提示：請先設定 AI 金鑰才能啟動 AI 聊天）"
ERROR_TEXT = "抱歉，我現在腦袋有點打結，請稍後再試，或聯絡真人客服。"

PERSONA_PROMPT = """
你現在是「多扶學堂」與「多扶接送」的溫暖客服助理。
1. 多扶學堂提供熟齡課程（文山區為主），包含認知、體適能、喜劇工作坊。
2. 多扶接送提供無障礙接送。
3. 若問到醫療建議，請委婉告知我們非醫療機構。
4. 若問到具體價格，請給範圍並引導按選單預約諮詢。
5. 語氣要親切、像跟家人說話。

使用者說：{user_query}
"""


class ChatService:
    """Answers text that no intake flow handles."""

    def __init__(self, settings=None):
        self.settings = settings or get_settings()

    def get_response(self, user_query: str) -> str:
        """
        Queries Gemini with the customer-service persona.
        """
        if not self.settings.GEMINI_API_KEY:
            return UNAVAILABLE_TEXT

        try:
            genai.configure(api_key=self.settings.GEMINI_API_KEY)
            model = genai.GenerativeModel(
                self.settings.GEMINI_MODEL,
                generation_config={"max_output_tokens": self.settings.ASSISTANT_MAX_TOKENS},
            )
            response = model.generate_content(PERSONA_PROMPT.format(user_query=user_query))
            return response.text.strip()
        except Exception as e:
            log("CHAT_SERVICE", f"Gemini call failed: {e}")
            return ERROR_TEXT

    async def respond(self, text: str) -> str:
        # The Gemini SDK call blocks; keep it off the event loop
        return await asyncio.to_thread(self.get_response, text)
