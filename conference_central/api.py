"""FastAPI application that exposes the conference endpoints."""
from __future__ import annotations

import functools
import logging
from datetime import date
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar

import anyio
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .conferences import ConferenceService, organizer_display_names
from .config import Settings, load_settings
from .database import Database
from .errors import ConferenceError
from .forms import CamelModel, ConferenceForm, ConferenceQueryForm, ProfileForm
from .models import Conference, Principal, Profile, TeeShirtSize
from .profiles import ProfileService
from .queries import QueryService
from .registration import RegistrationResult, RegistrationService
from .security import APIKeyIdentity

logger = logging.getLogger("conference_central.api")

T = TypeVar("T")
IdentityProvider = Callable[[Request], Awaitable[Optional[Principal]]]


class ProfileResponse(CamelModel):
    user_id: str
    display_name: Optional[str]
    main_email: Optional[str]
    tee_shirt_size: TeeShirtSize
    conference_keys_to_attend: List[str]


class ConferenceResponse(CamelModel):
    websafe_key: str
    conference_id: int
    name: str
    description: Optional[str]
    organizer_user_id: str
    organizer_display_name: Optional[str]
    topics: List[str]
    city: Optional[str]
    start_date: Optional[date]
    end_date: Optional[date]
    month: int
    max_attendees: int
    seats_available: int


class RegistrationResponse(CamelModel):
    result: bool
    reason: str


def profile_to_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        user_id=profile.user_id,
        display_name=profile.display_name,
        main_email=profile.main_email,
        tee_shirt_size=profile.tee_shirt_size,
        conference_keys_to_attend=list(profile.conference_keys_to_attend),
    )


def conference_to_response(
    conference: Conference,
    organizer_names: Mapping[str, Optional[str]],
) -> ConferenceResponse:
    return ConferenceResponse(
        websafe_key=conference.websafe_key,
        conference_id=conference.conference_id,
        name=conference.name,
        description=conference.description,
        organizer_user_id=conference.organizer_user_id,
        organizer_display_name=organizer_names.get(conference.organizer_user_id),
        topics=list(conference.topics),
        city=conference.city,
        start_date=conference.start_date,
        end_date=conference.end_date,
        month=conference.month,
        max_attendees=conference.max_attendees,
        seats_available=conference.seats_available,
    )


def registration_to_response(result: RegistrationResult) -> RegistrationResponse:
    return RegistrationResponse(result=result.result, reason=result.reason)


async def _run(func: Callable[..., T], *args: Any) -> T:
    """Run a blocking service call on a worker thread."""

    return await anyio.to_thread.run_sync(functools.partial(func, *args))


def create_app(
    *,
    database: Database | None = None,
    identity: IdentityProvider | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    if database is None:
        settings = settings or load_settings()
        database = settings.open_database()

    if identity is None:
        identity = APIKeyIdentity(database)

    profiles = ProfileService(database)
    conferences = ConferenceService(database)
    queries = QueryService(database)
    registrations = RegistrationService(database)

    app = FastAPI(
        title="Conference Central",
        description="API for the Conference Central backend application",
        version="1.0.0",
    )
    app.state.database = database

    async def get_principal(request: Request) -> Optional[Principal]:
        return await identity(request)

    def _with_organizers(items: List[Conference]) -> List[ConferenceResponse]:
        names = organizer_display_names(database, items)
        return [conference_to_response(conference, names) for conference in items]

    async def _respond_list(items: List[Conference]) -> List[ConferenceResponse]:
        return await _run(_with_organizers, items)

    async def _respond_one(conference: Conference) -> ConferenceResponse:
        return (await _respond_list([conference]))[0]

    @app.get("/health")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    router = APIRouter()

    @router.post("/profile", response_model=ProfileResponse, name="saveProfile")
    async def save_profile(
        payload: Optional[ProfileForm] = None,
        principal: Optional[Principal] = Depends(get_principal),
    ) -> ProfileResponse:
        profile = await _run(profiles.save_profile, principal, payload)
        return profile_to_response(profile)

    @router.get("/profile", response_model=Optional[ProfileResponse], name="getProfile")
    async def get_profile(principal: Optional[Principal] = Depends(get_principal)) -> Optional[ProfileResponse]:
        profile = await _run(profiles.get_profile, principal)
        if profile is None:
            return None
        return profile_to_response(profile)

    @router.post("/conference", response_model=ConferenceResponse, name="createConference")
    async def create_conference(
        payload: ConferenceForm,
        principal: Optional[Principal] = Depends(get_principal),
    ) -> ConferenceResponse:
        conference = await _run(conferences.create_conference, principal, payload)
        return await _respond_one(conference)

    @router.put(
        "/conference/{websafe_conference_key}",
        response_model=ConferenceResponse,
        name="updateConference",
    )
    async def update_conference(
        websafe_conference_key: str,
        payload: ConferenceForm,
        principal: Optional[Principal] = Depends(get_principal),
    ) -> ConferenceResponse:
        conference = await _run(conferences.update_conference, principal, websafe_conference_key, payload)
        return await _respond_one(conference)

    @router.get(
        "/conference/{websafe_conference_key}",
        response_model=ConferenceResponse,
        name="getConference",
    )
    async def get_conference(websafe_conference_key: str) -> ConferenceResponse:
        conference = await _run(conferences.get_conference, websafe_conference_key)
        return await _respond_one(conference)

    @router.post("/queryConferences", response_model=List[ConferenceResponse], name="queryConferences")
    async def query_conferences(payload: Optional[ConferenceQueryForm] = None) -> List[ConferenceResponse]:
        items = await _run(queries.query_conferences, payload)
        return await _respond_list(items)

    @router.post(
        "/getConferencesCreated",
        response_model=List[ConferenceResponse],
        name="getConferencesCreated",
    )
    async def get_conferences_created(
        principal: Optional[Principal] = Depends(get_principal),
    ) -> List[ConferenceResponse]:
        items = await _run(conferences.get_conferences_created, principal)
        return await _respond_list(items)

    @router.post(
        "/getConferencesFiltered",
        response_model=List[ConferenceResponse],
        name="getConferencesFiltered",
    )
    async def get_conferences_filtered() -> List[ConferenceResponse]:
        items = await _run(queries.get_conferences_filtered)
        return await _respond_list(items)

    @router.post(
        "/conference/{websafe_conference_key}/registration",
        response_model=RegistrationResponse,
        name="registerForConference",
    )
    async def register_for_conference(
        websafe_conference_key: str,
        principal: Optional[Principal] = Depends(get_principal),
    ) -> RegistrationResponse:
        result = await _run(registrations.register_for_conference, principal, websafe_conference_key)
        return registration_to_response(result)

    @router.delete(
        "/conference/{websafe_conference_key}/registration",
        response_model=RegistrationResponse,
        name="unregisterFromConference",
    )
    async def unregister_from_conference(
        websafe_conference_key: str,
        principal: Optional[Principal] = Depends(get_principal),
    ) -> RegistrationResponse:
        result = await _run(registrations.unregister_from_conference, principal, websafe_conference_key)
        return registration_to_response(result)

    @router.get(
        "/getConferencesToAttend",
        response_model=List[ConferenceResponse],
        name="getConferencesToAttend",
    )
    async def get_conferences_to_attend(
        principal: Optional[Principal] = Depends(get_principal),
    ) -> List[ConferenceResponse]:
        items = await _run(registrations.get_conferences_to_attend, principal)
        return await _respond_list(items)

    app.include_router(router)

    @app.exception_handler(ConferenceError)
    async def handle_conference_error(_: object, exc: ConferenceError):
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Request failed: %s", exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: object, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    return app


__all__ = ["create_app"]
