"""Real-time infrastructure — Redis state + pub/sub + WebSocket.

Learn: Events flow through two hops:
1. Managers → Redis PUBLISH after writing the bounded log / counter
2. Redis SUBSCRIBE → SubscriptionRegistry handle → WebSocket client

Producers never know who is listening; consumers re-query the logs to
catch up on anything they missed while disconnected.
"""
