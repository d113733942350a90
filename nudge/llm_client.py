"""nudge.llm_client

LiteLLM ラッパー。

LLM API 呼び出しを抽象化するクライアントクラス。
`litellm.completion()`（OpenAI の chat.completions 互換の messages 形式）で JSON 応答を生成する。
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, List, Optional

import litellm


_LLM_IO_LOGGER_NAME = "nudge.llm_io"


def _first_choice_content(resp: Any) -> str:
    """
    choices[0].message.contentを取り出すユーティリティ。
    LLMレスポンスから本文テキストを抽出する。
    """
    try:
        choice = resp.choices[0]
        message = getattr(choice, "message", None) or choice["message"]
        content = getattr(message, "content", None) or message["content"]
    except (AttributeError, IndexError, KeyError, TypeError):
        return ""
    # OpenAI形式で content が list の場合もあるため統一
    if isinstance(content, list):
        return "".join([item.get("text", "") if isinstance(item, dict) else str(item) for item in content]) or ""
    return content or ""


def _finish_reason(resp: Any) -> str:
    """レスポンスからfinish_reasonを取得する。"""
    try:
        choice = resp.choices[0]
        finish_reason = getattr(choice, "finish_reason", None) or choice.get("finish_reason")
    except (AttributeError, IndexError, KeyError, TypeError):
        return ""
    return str(finish_reason or "")


def _estimate_text_chars(messages: List[Dict[str, Any]]) -> int:
    """messages の本文文字数（概算）を返す。"""
    return sum(len(str(m.get("content") or "")) for m in messages)


def _truncate_for_log(text: str, max_chars: int) -> str:
    """ログ用に文字列を切り詰める。"""
    s = str(text or "")
    if len(s) <= max_chars:
        return s
    return s[:max_chars] + f"...(truncated {len(s) - max_chars} chars)"


class LlmRequestPurpose:
    """LLM呼び出しの処理目的（ログ用途のラベル）。"""

    SYNC_REMINDER_GENERATION = "＜＜ リマインダー一括生成 ＞＞"
    SYNC_QUICK_ADD = "＜＜ クイック追加の解析 ＞＞"


class LlmClient:
    """
    LLM APIクライアント。
    LiteLLMを使用してLLM APIを呼び出し、JSON生成を行う。
    """

    # ログ出力時のプレビュー文字数
    _DEBUG_PREVIEW_CHARS = 5000

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        llm_base_url: Optional[str] = None,
        max_tokens: int = 2000,
        timeout_seconds: int = 30,
    ):
        """
        LLMクライアントを初期化する。

        Args:
            model: LiteLLM のモデル名
            api_key: LLM APIキー（未指定ならプロバイダ既定の環境変数）
            llm_base_url: LLM APIベースURL（ローカルLLM等のOpenAI互換向け）
            max_tokens: 最大トークン数
            timeout_seconds: LLM API のタイムアウト秒数
        """
        self.io_logger = logging.getLogger(_LLM_IO_LOGGER_NAME)
        self.model = model
        self.api_key = api_key
        self.llm_base_url = llm_base_url
        self.max_tokens = int(max_tokens)
        # NOTE: 外部LLMが停滞するとAPI応答が返らなくなるため、上限を設ける。
        self.timeout_seconds = int(timeout_seconds)

    def _build_completion_kwargs(
        self,
        messages: List[Dict],
        *,
        max_tokens: Optional[int] = None,
        response_format: Optional[Dict] = None,
    ) -> Dict:
        """completion API呼び出し用のkwargsを構築する。"""
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "timeout": self.timeout_seconds,
        }

        # オプションパラメータを追加
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.llm_base_url:
            kwargs["api_base"] = self.llm_base_url
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        if response_format:
            kwargs["response_format"] = response_format
        return kwargs

    def generate_json_response(
        self,
        *,
        system_prompt: str,
        input_text: str,
        purpose: str,
        max_tokens: Optional[int] = None,
        json_object: bool = True,
    ):
        """JSON を生成する（Responseオブジェクト）。

        INFO: 送受信した事実（メタ情報）のみ
        DEBUG: 内容も出す（トリミング）

        Args:
            json_object: True なら response_format=json_object を要求する。
                配列を返させたい場合は False（json_object はトップレベルがオブジェクト前提のため）。
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": input_text},
        ]
        kwargs = self._build_completion_kwargs(
            messages,
            max_tokens=max_tokens or self.max_tokens,
            response_format={"type": "json_object"} if json_object else None,
        )

        self.io_logger.info(
            "LLM request 送信 %s kind=json model=%s messages=%s 文字数=%s",
            purpose,
            self.model,
            len(messages),
            _estimate_text_chars(messages),
        )
        if self.io_logger.isEnabledFor(logging.DEBUG):
            self.io_logger.debug(
                "LLM request (json): %s",
                _truncate_for_log(json.dumps(messages, ensure_ascii=False), self._DEBUG_PREVIEW_CHARS),
            )

        start = time.perf_counter()
        try:
            resp = litellm.completion(**kwargs)
        except Exception as exc:  # noqa: BLE001
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            self.io_logger.error(
                "LLM request failed %s kind=json ms=%s error=%s",
                purpose,
                elapsed_ms,
                str(exc),
                exc_info=exc,
            )
            raise

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        content = _first_choice_content(resp)
        self.io_logger.info(
            "LLM response 受信 %s kind=json finish_reason=%s chars=%s ms=%s",
            purpose,
            _finish_reason(resp),
            len(content or ""),
            elapsed_ms,
        )
        if self.io_logger.isEnabledFor(logging.DEBUG):
            self.io_logger.debug("LLM response (json): %s", _truncate_for_log(content, self._DEBUG_PREVIEW_CHARS))
        return resp

    def response_content(self, resp: Any) -> str:
        """Responseから本文（choices[0].message.content）を取り出す。"""
        return _first_choice_content(resp)
