from __future__ import annotations

from fastapi import Request, Response
from starlette.background import BackgroundTask

from collector.core.dispatch import DispatchGateway
from collector.core.identity import TrackingIdentity
from collector.core.response import TransparentImage, accepted_response, method_not_allowed_response
from collector.schema.events import BeaconEvent, RequestContext

"""
    Beacon request handling, in three steps:

    1. resolve the party and session identifiers (cookies are set or renewed)
    2. acknowledge with 202 and the transparent image
    3. hand the event to the processing pool once the response has been sent
"""
class EventHandler:
    def __init__(
        self,
        *,
        party: TrackingIdentity,
        session: TrackingIdentity,
        image: TransparentImage,
        gateway: DispatchGateway,
    ) -> None:
        self.party = party
        self.session = session
        self.image = image
        self.gateway = gateway

    def handle(self, request: Request) -> Response:
        # Only GET; nothing is read, written or dispatched for other methods.
        if request.method != "GET":
            return method_not_allowed_response(request.method)

        response = accepted_response(self.image)
        party_id = self.party.resolve(request.cookies, response.headers)
        session_id = self.session.resolve(request.cookies, response.headers)

        event = BeaconEvent(
            party_id=party_id,
            session_id=session_id,
            context=RequestContext.from_request(request),
        )
        response.background = BackgroundTask(self.gateway.dispatch, event)
        return response
