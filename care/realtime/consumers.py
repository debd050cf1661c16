import json
from channels.generic.websocket import AsyncWebsocketConsumer

class UpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes donation events so center lists and leaderboards can refresh."""
    GROUP = "updates"

    async def connect(self):
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def donation_registered(self, event):
        # event: {"type": "donation.registered", "userId", "centerId", "userTotal", "centerTotal", "ts"}
        await self.send(json.dumps(event))
