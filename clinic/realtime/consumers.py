import json

from channels.generic.websocket import AsyncWebsocketConsumer

from clinic.services.notifications import NOTIFICATIONS_GROUP, user_group


class _StaffConsumer(AsyncWebsocketConsumer):
    """Joins ``group_for(user)`` on connect; anonymous sockets are closed."""

    def group_for(self, user) -> str:
        raise NotImplementedError

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            await self.close(code=4001)
            return
        self.group_name = self.group_for(user)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "group": self.group_name}))

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)


class MessagesConsumer(_StaffConsumer):
    def group_for(self, user) -> str:
        return user_group(user.id)

    async def message_new(self, event):
        # event: {"type": "message.new", "messageId": int, "senderId": int, ...}
        await self.send(json.dumps(event))


class NotificationsConsumer(_StaffConsumer):
    def group_for(self, user) -> str:
        return NOTIFICATIONS_GROUP

    async def clinic_alert(self, event):
        # event: {"type": "clinic.alert", "kind": "emergency"|"vital"|"appointment", ...}
        await self.send(json.dumps(event))
