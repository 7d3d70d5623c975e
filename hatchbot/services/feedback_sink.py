from __future__ import annotations

import asyncio
import json
import logging
import threading
from typing import Any

from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build

from hatchbot.config import Settings
from hatchbot.errors import FeedbackConfigError
from hatchbot.schemas.feedback import FeedbackRow


logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


def parse_service_account(raw: str | None) -> dict[str, str] | None:
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(parsed, dict) or not parsed.get("client_email") or not parsed.get("private_key"):
        return None
    info = dict(parsed)
    info["private_key"] = str(parsed["private_key"]).replace("\\n", "\n")
    info.setdefault("token_uri", GOOGLE_TOKEN_URI)
    return info


class SheetsFeedbackSink:
    def __init__(
        self,
        sheet_id: str,
        tab_name: str = "Feedback",
        service_account_json: str | None = None,
        service: Any | None = None,
    ) -> None:
        self.sheet_id = sheet_id
        self.tab_name = tab_name
        self._service_account_json = service_account_json
        self._service = service
        # The httplib2 transport behind the Sheets client is not thread-safe.
        self._lock = threading.Lock()

    async def append(self, row: FeedbackRow) -> None:
        await asyncio.to_thread(self._append_sync, row)

    def _append_sync(self, row: FeedbackRow) -> None:
        with self._lock:
            service = self._get_service()
            service.spreadsheets().values().append(
                spreadsheetId=self.sheet_id,
                range=f"{self.tab_name}!A1",
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [row.to_sheet_values()]},
            ).execute()
        logger.info("Stored %s feedback for %s", row.rating, row.share_url)

    def _get_service(self) -> Any:
        if self._service is not None:
            return self._service
        info = parse_service_account(self._service_account_json)
        if info is None:
            raise FeedbackConfigError("GOOGLE_SERVICE_ACCOUNT_JSON not set or invalid")
        credentials = Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)
        self._service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        return self._service


def build_feedback_sink(settings: Settings) -> SheetsFeedbackSink | None:
    if not settings.feedback_sheet_id:
        return None
    return SheetsFeedbackSink(
        sheet_id=settings.feedback_sheet_id,
        tab_name=settings.feedback_sheet_tab,
        service_account_json=settings.google_service_account_json,
    )
