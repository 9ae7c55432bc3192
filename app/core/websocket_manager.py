# app/core/websocket_manager.py

from fastapi import WebSocket
from typing import Any, Dict, List
import json
import logging

logger = logging.getLogger(__name__)

# 連線登記表：維護 'user_id' -> List[WebSocket] 的映射
class ConnectionRegistry:
    """管理 WebSocket 連線：同一個身分可以有多個連線 (多個分頁/裝置)。"""

    def __init__(self):
        # 結構: {user_id: [WebSocket, ...]}
        self.active_connections: Dict[str, List[WebSocket]] = {}

    def register_connection(self, user_id: str, websocket: WebSocket) -> None:
        self.active_connections.setdefault(user_id, []).append(websocket)
        logger.info(f"User {user_id} connected. Total connections: {len(self.active_connections[user_id])}")

    def unregister_connection(self, user_id: str, websocket: WebSocket) -> None:
        connections = self.active_connections.get(user_id)
        if not connections or websocket not in connections:
            return # 可能是重複斷開
        connections.remove(websocket)
        if not connections:
            del self.active_connections[user_id]
        logger.info(f"User {user_id} disconnected. Remaining connections: {len(self.active_connections.get(user_id, []))}")

    def connection_count(self, user_id: str) -> int:
        return len(self.active_connections.get(user_id, []))

    async def send_to_identity(self, user_id: str, event_name: str, payload: Dict[str, Any]) -> int:
        """
        將事件送給該身分的所有連線，回傳成功送達的連線數。
        沒有連線時直接丟棄 (不保存、不重送)。
        """
        connections = list(self.active_connections.get(user_id, []))
        if not connections:
            logger.info(f"User {user_id} has no active connection, event '{event_name}' dropped")
            return 0

        message = json.dumps({"event": event_name, "data": payload}, ensure_ascii=False)
        delivered = 0
        disconnected_clients = []
        for ws in connections:
            try:
                await ws.send_text(message)
                delivered += 1
            except Exception as e:
                # 單一連線送不出去不影響其他連線
                logger.warning(f"Send to user {user_id} failed: {e}")
                disconnected_clients.append(ws)

        for ws in disconnected_clients:
            self.unregister_connection(user_id, ws)
        return delivered

# 實例化登記表 (由 WebSocket 路由負責登記/移除)
manager = ConnectionRegistry()
