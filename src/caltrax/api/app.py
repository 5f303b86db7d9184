"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime
from zoneinfo import ZoneInfo

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from caltrax.api.auth import current_user_id, require_paid_user
from caltrax.api.models import AnalyzeRequest, FoodEntryRequest, ProfileRequest
from caltrax.app_logging import configure_logging
from caltrax.containers import AppContainer
from caltrax.domain.barcode import BarcodeProduct
from caltrax.domain.ledger import DayBucket, WeekBucket
from caltrax.domain.profile import GoalTargets
from caltrax.errors import MissingFieldError, StorageUnavailableError
from caltrax.services.goals import compute_goals, goal_progress
from caltrax.services.ledger import entry_to_dict, weekly_totals
from caltrax.services.profiles import profile_to_dict
from caltrax.services.vision import decode_image


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            remaining = await state_container.remote_sync.flush()
            if remaining:
                logger.warning("%s remote sync operations still pending", remaining)
        except Exception:
            logger.exception("Failed to flush pending remote sync operations")
        yield
        await state_container.remote_sync.wait_idle()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(MissingFieldError)
    async def missing_field_handler(
        _request: Request, exc: MissingFieldError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "field": exc.field},
        )

    @app.exception_handler(StorageUnavailableError)
    async def storage_unavailable_handler(
        _request: Request, exc: StorageUnavailableError
    ) -> JSONResponse:
        logger.error("Local storage unavailable: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_507_INSUFFICIENT_STORAGE,
            content={"detail": "Local storage unavailable"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/goals", dependencies=[Depends(current_user_id)])
    async def goals(payload: ProfileRequest) -> dict[str, object]:
        """Compute goals for a profile without storing it."""
        return _targets_payload(compute_goals(payload.to_profile()))

    @app.put("/profile")
    async def save_profile(
        payload: ProfileRequest,
        request: Request,
        user_id: str = Depends(current_user_id),
    ) -> dict[str, object]:
        """Store the profile with freshly computed goals."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.save_profile(
            user_id, payload.to_profile()
        )
        return profile_to_dict(profile)

    @app.get("/profile")
    async def get_profile(
        request: Request, user_id: str = Depends(current_user_id)
    ) -> dict[str, object]:
        """Return the stored profile."""
        state_container: AppContainer = request.app.state.container
        profile = await state_container.profile_service.pull_profile(user_id)
        if profile is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return profile_to_dict(profile)

    @app.get("/days/{day}")
    async def get_day(
        day: date, request: Request, user_id: str = Depends(current_user_id)
    ) -> dict[str, object]:
        """Return a day's entries, totals and progress against goals."""
        state_container: AppContainer = request.app.state.container
        bucket = await state_container.ledger.pull_day(user_id, day)
        targets = state_container.profile_service.goal_targets(user_id)
        return _day_payload(bucket, targets)

    @app.post("/days/{day}/entries", status_code=status.HTTP_201_CREATED)
    async def add_entry(
        day: date,
        payload: FoodEntryRequest,
        request: Request,
        user_id: str = Depends(current_user_id),
    ) -> dict[str, object]:
        """Log a food entry on a day."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.ledger.add_entry(
            user_id, day, payload.to_entry_input()
        )
        return entry_to_dict(entry)

    @app.delete("/days/{day}/entries/{entry_id}")
    async def delete_entry(
        day: date,
        entry_id: str,
        request: Request,
        user_id: str = Depends(current_user_id),
    ) -> dict[str, bool]:
        """Delete a food entry; unknown entries are reported, not rejected."""
        state_container: AppContainer = request.app.state.container
        deleted = state_container.ledger.delete_entry(user_id, day, entry_id)
        return {"deleted": deleted}

    @app.get("/weeks/{day}")
    async def get_week(
        day: date, request: Request, user_id: str = Depends(current_user_id)
    ) -> dict[str, object]:
        """Return the Monday-anchored week containing a day."""
        state_container: AppContainer = request.app.state.container
        week = await state_container.ledger.pull_week(user_id, day)
        targets = state_container.profile_service.goal_targets(user_id)
        return _week_payload(week, targets)

    @app.post("/analyze")
    async def analyze(
        payload: AnalyzeRequest,
        request: Request,
        user_id: str = Depends(require_paid_user),
    ) -> dict[str, object]:
        """Analyze a food photo and optionally log the result."""
        state_container: AppContainer = request.app.state.container
        try:
            image_bytes = decode_image(payload.image)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        try:
            analysis = await state_container.vision_service.analyze(image_bytes)
        except Exception as exc:
            logger.exception("Food analysis failed for user %s", user_id)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail="Analysis failed"
            ) from exc
        logger.info("Analyzed food for user %s: %s", user_id, analysis.name)
        result: dict[str, object] = {"analysis": analysis.model_dump()}
        if payload.log:
            day = payload.day or _today(state_container.settings.default_timezone)
            entry = state_container.ledger.add_entry(
                user_id, day, analysis.to_entry_input()
            )
            result["entry"] = entry_to_dict(entry)
            result["date"] = day.isoformat()
        return result

    @app.get("/barcode/{code}", dependencies=[Depends(current_user_id)])
    async def barcode(code: str, request: Request) -> dict[str, object]:
        """Look up a packaged product by barcode."""
        state_container: AppContainer = request.app.state.container
        try:
            product = await state_container.barcode_service.lookup(code)
        except Exception as exc:
            logger.exception("Barcode lookup failed for %s", code)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail="Lookup failed"
            ) from exc
        if product is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _product_payload(product)

    return app


def _today(timezone_name: str) -> date:
    return datetime.now(tz=ZoneInfo(timezone_name)).date()


def _targets_payload(targets: GoalTargets) -> dict[str, object]:
    return {
        "calories": targets.calories,
        "macros": {
            "protein_g": targets.macros.protein_g,
            "fat_g": targets.macros.fat_g,
            "carbs_g": targets.macros.carbs_g,
        },
    }


def _progress_payload(
    bucket: DayBucket, targets: GoalTargets | None
) -> dict[str, object] | None:
    if targets is None:
        return None
    return {
        name: {"percent": round(progress.percent, 1), "band": progress.band}
        for name, progress in goal_progress(bucket.totals, targets).items()
    }


def _day_payload(bucket: DayBucket, targets: GoalTargets | None) -> dict[str, object]:
    return {
        "date": bucket.date.isoformat(),
        "entries": [entry_to_dict(entry) for entry in bucket.entries],
        "totals": bucket.totals.to_dict(),
        "goals": _targets_payload(targets) if targets else None,
        "progress": _progress_payload(bucket, targets),
    }


def _week_payload(week: WeekBucket, targets: GoalTargets | None) -> dict[str, object]:
    return {
        "start": week.start.isoformat(),
        "days": [_day_payload(day, targets) for day in week.days],
        "weekly_totals": weekly_totals(week).to_dict(),
    }


def _product_payload(product: BarcodeProduct) -> dict[str, object]:
    return {
        "barcode": product.barcode,
        "name": product.name,
        "brand": product.brand,
        "nutrition": product.nutrition.to_dict(),
        "basis": product.basis,
        "serving_size": product.serving_size,
        "nutriscore_grade": product.nutriscore_grade,
    }
