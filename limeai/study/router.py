# limeai/study/router.py
# Summaries and notes Q&A through Gemini. Keeps the API key server-side.
from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from limeai.config import settings
from limeai.deps import get_gemini
from limeai.infra.upstream import GeminiClient, UpstreamError

log = logging.getLogger("limeai.study")
router = APIRouter(prefix="/api", tags=["study"])

CHAT_HISTORY_TURNS = 5

SUMMARY_PROMPT = (
    "You are a helpful assistant that converts unstructured notes into a well-organized "
    "summary. Structure the content with clear sections and concise bullet points. Maintain "
    "essential details while ensuring readability. Use plain text formatting for a clean and "
    "professional appearance. Also maintain good spacing between paragraphs make the summary "
    "look appealing.\n\nHere is the content to summarize:\n{content}"
)

CHAT_PROMPT = """You are a helpful study assistant chatbot.
Answer questions ONLY based on the summarized notes provided below.
If the answer isn't in the notes, say "I don't see information about that in the notes."
Keep answers concise but thorough. Also explain in simple terms and ask a follow-up question if the user understood or not.
If not, explain in simpler words by giving real-world examples apart from content provided.
Use bullet points for complex answers. While generating answers, maintain good spacing and punctuation in your sentences and between paragraphs.
Important: Do not use markdown, use plain text formatting for a clean and professional appearance.
Here are the summarized notes:

{notes}"""


class SummarizeRequest(BaseModel):
    content: str = Field(..., min_length=1)


class ChatTurn(BaseModel):
    role: Literal["user", "model"]
    text: str


class ChatRequest(BaseModel):
    notes: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    history: list[ChatTurn] = Field(default_factory=list)


def _turn(role: str, text: str) -> dict:
    return {"role": role, "parts": [{"text": text}]}


def build_chat_contents(req: ChatRequest) -> list[dict]:
    """System prompt as the first user turn, the last few turns, then the new message."""
    recent = [_turn(t.role, t.text) for t in req.history[-CHAT_HISTORY_TURNS:]]
    return [_turn("user", CHAT_PROMPT.format(notes=req.notes)), *recent, _turn("user", req.message)]


def _call(gemini: GeminiClient, model: str, contents: list[dict], temp: float, max_tokens: int) -> str:
    if not gemini.configured:
        raise HTTPException(status_code=500, detail="GEMINI_API_KEY is not configured")
    try:
        return gemini.generate(model, contents, temperature=temp, max_output_tokens=max_tokens)
    except UpstreamError as e:
        log.error('gemini_error model=%s status=%s err="%s"', model, e.status_code, e)
        raise HTTPException(status_code=502, detail=str(e)) from e


@router.post("/summarize")
def summarize(req: SummarizeRequest, gemini: GeminiClient = Depends(get_gemini)):
    contents = [_turn("user", SUMMARY_PROMPT.format(content=req.content))]
    summary = _call(gemini, settings.GEMINI_SUMMARY_MODEL, contents, 0.3, 1500)
    return {"summary": summary}


@router.post("/chat")
def chat(req: ChatRequest, gemini: GeminiClient = Depends(get_gemini)):
    reply = _call(gemini, settings.GEMINI_CHAT_MODEL, build_chat_contents(req), 0.2, 1024)
    return {"reply": reply}
