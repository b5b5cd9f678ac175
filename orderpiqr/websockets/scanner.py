"""
==============================================================================
Scanner WebSocket Module
==============================================================================

Real-time scan submission via WebSocket connection.

The client decodes barcodes itself and sends the decoded text; the
server answers every scan with the updated session state so the client
only has to render instruction_text and progress_percent.

Protocol:
---------
1. Client connects to /ws/sessions/{session_id}
2. Server sends {"type": "init", "session": {...}}
3. Client sends {"type": "scan", "code": "..."}
4. Server returns {"type": "scan_result", "outcome", "message", "session"}
   or {"type": "duplicate"} for a repeat of the previous code within the
   cooldown window
5. Client sends {"type": "stop"} to end

==============================================================================
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
from sqlalchemy.orm import Session

from orderpiqr.config import get_settings
from orderpiqr.core import exceptions
from orderpiqr.core.exceptions import AppException
from orderpiqr.db.database import get_db
from orderpiqr.schemas.scan_session import ScanSessionDetail
from orderpiqr.services.scan_session_service import ScanSessionService


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()


class ScannerWebSocketHandler:
    """
    Handler for scan WebSocket connections.

    Manages the lifecycle of one scanning connection:
    - Session lookup
    - Duplicate scan suppression
    - Scan handling and state reporting
    """

    def __init__(self, websocket: WebSocket, db: Session, session_id: str):
        self._websocket = websocket
        self._session_id = session_id
        self._settings = get_settings()
        self._service = ScanSessionService(db)
        self._last_code: Optional[str] = None
        self._last_scan_time: Optional[float] = None

    def _state(self, session) -> dict:
        return ScanSessionDetail.from_model(
            session, self._service.project(session)
        ).model_dump(mode="json")

    async def send_error(self, message: str, code: str = "ERROR") -> None:
        """Send error message to client."""
        await self._websocket.send_json({
            "type": "error",
            "code": code,
            "message": message
        })

    async def send_init(self) -> bool:
        """Send initial session state, False if the session does not exist."""
        try:
            session = self._service.get_session(self._session_id)
        except AppException as e:
            await self.send_error(e.message, e.code)
            return False

        await self._websocket.send_json({
            "type": "init",
            "session": self._state(session)
        })
        return True

    def is_duplicate(self, code: str) -> bool:
        """
        Check for a repeat of the previous code within the cooldown.

        A camera keeps decoding the same code while it stays in view.
        """
        now = time.monotonic()
        duplicate = (
            self._last_code == code
            and self._last_scan_time is not None
            and now - self._last_scan_time < self._settings.scan_cooldown_seconds
        )
        self._last_code = code
        self._last_scan_time = now
        return duplicate

    async def handle_scan(self, data: dict) -> None:
        """Handle scan message from client."""
        code = data.get("code")

        if not isinstance(code, str) or not code:
            await self.send_error("Scan code must be a non-empty string", "INVALID_SCAN")
            return

        if self.is_duplicate(code):
            await self._websocket.send_json({"type": "duplicate", "code": code})
            return

        try:
            result = self._service.handle_scan(self._session_id, code)
        except AppException as e:
            await self.send_error(e.message, e.code)
            return

        await self._websocket.send_json({
            "type": "scan_result",
            "outcome": result.outcome.value,
            "message": result.message,
            "session": self._state(result.session)
        })

    async def run(self) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        logger.info(f"📱 Scanner WebSocket connected: {self._session_id}")

        try:
            if not await self.send_init():
                await self._websocket.close()
                return

            while True:
                data = await self._websocket.receive_json()

                if not isinstance(data, dict):
                    await self.send_error("Message must be a JSON object", "INVALID_MESSAGE")
                    continue

                if data.get("type") == "scan":
                    await self.handle_scan(data)

                elif data.get("type") == "stop":
                    logger.info("🛑 Client requested stop")
                    await self._websocket.close()
                    break

                else:
                    await self.send_error(
                        f"Unknown message type: {data.get('type')}",
                        "UNKNOWN_MESSAGE"
                    )

        except WebSocketDisconnect:
            logger.info("📱 Client disconnected")
        except Exception as e:
            logger.error(f"WebSocket error: {e}")
            error = exceptions.internal_error()
            try:
                await self.send_error(error.message, error.code)
                await self._websocket.close()
            except Exception:
                pass
        finally:
            logger.info("✅ Scanner WebSocket closed")


@router.websocket("/ws/sessions/{session_id}")
async def websocket_scan(
    websocket: WebSocket,
    session_id: str,
    db: Session = Depends(get_db)
):
    """Real-time scan submission via WebSocket."""
    handler = ScannerWebSocketHandler(websocket, db, session_id)
    await handler.run()
