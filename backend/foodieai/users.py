# foodieai/users.py
# ---------------------------------------------------------
# Users, profiles and daily targets.
#
# Targets (calories / protein / fat / carbs) are never set by
# hand: they are recomputed by tdee.calculate_targets() every
# time the profile has all biometric fields.
# ---------------------------------------------------------

import re
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from foodieai.errors import InvalidInputError, MissingFieldsError, UserNotFoundError
from foodieai.logger import get_logger
from foodieai.models import User, UserProfile
from foodieai.schemas import TargetsOut, UserMeOut, UserProfileOut, UserProfileUpsertIn
from foodieai.tdee import calculate_targets

logger = get_logger(__name__)

# Needed by the TDEE calculator (wire names)
REQUIRED_TARGET_FIELDS = ["sex", "birthDate", "heightCm", "weightKg", "activityLevel"]

_BIRTH_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# ---------------------------------------------------------
# Users
# ---------------------------------------------------------

def get_or_create_by_external_id(db: Session, external_id: str) -> User:
    stmt = select(User).where(User.external_id == external_id)
    user = db.execute(stmt).scalars().first()
    if user is not None:
        return user

    user = User(external_id=external_id)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Another request created the same user first
        db.rollback()
        user = db.execute(stmt).scalars().one()
        return user

    logger.info(f"Created user {user.id} for external subject")
    return user


def get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


# ---------------------------------------------------------
# Profile
# ---------------------------------------------------------

def parse_birth_date(value: str) -> date:
    if not _BIRTH_DATE_RE.match(value):
        raise InvalidInputError("birthDate", "date in YYYY-MM-DD format", value)
    year, month, day = (int(part) for part in value.split("-"))
    try:
        return date(year, month, day)
    except ValueError:
        raise InvalidInputError("birthDate", "existing calendar date", value) from None


def _missing_target_fields(profile: UserProfile) -> list[str]:
    values = {
        "sex": profile.sex,
        "birthDate": profile.birth_date,
        "heightCm": profile.height_cm,
        "weightKg": profile.weight_kg,
        "activityLevel": profile.activity_level,
    }
    return [name for name in REQUIRED_TARGET_FIELDS if not values[name]]


def _apply_targets(profile: UserProfile) -> None:
    targets = calculate_targets(
        sex=profile.sex,
        birth_date=profile.birth_date,
        height_cm=profile.height_cm,
        weight_kg=profile.weight_kg,
        activity_level=profile.activity_level,
        goal=profile.goal or "MAINTAIN",
        calorie_delta=profile.calorie_delta,
    )
    profile.target_calories = targets.target_calories
    profile.target_protein_g = targets.target_protein_g
    profile.target_fat_g = targets.target_fat_g
    profile.target_carbs_g = targets.target_carbs_g


def _get_profile(db: Session, user_id: str) -> Optional[UserProfile]:
    stmt = select(UserProfile).where(UserProfile.user_id == user_id)
    return db.execute(stmt).scalars().first()


def upsert_profile(db: Session, user_id: str, data: UserProfileUpsertIn) -> UserProfile:
    """
    Partial update: only fields present in `data` are written.
    Targets are recomputed when every biometric field is known.
    """
    get_user(db, user_id)

    # Only what the caller actually sent
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    if "birth_date" in updates:
        updates["birth_date"] = parse_birth_date(updates["birth_date"])

    profile = _get_profile(db, user_id)
    if profile is None:
        profile = UserProfile(user_id=user_id)
        db.add(profile)

    for field, value in updates.items():
        setattr(profile, field, value)

    if not _missing_target_fields(profile):
        _apply_targets(profile)

    db.commit()
    db.refresh(profile)
    return profile


def recalculate_targets(db: Session, user_id: str) -> UserProfile:
    profile = _get_profile(db, user_id)
    if profile is None:
        raise MissingFieldsError(list(REQUIRED_TARGET_FIELDS))

    missing = _missing_target_fields(profile)
    if missing:
        raise MissingFieldsError(missing)

    _apply_targets(profile)
    db.commit()
    db.refresh(profile)
    return profile


# ---------------------------------------------------------
# user.me
# ---------------------------------------------------------

def profile_to_me(profile: Optional[UserProfile]) -> UserMeOut:
    if profile is None:
        return UserMeOut(profile=None, targets=TargetsOut())
    return UserMeOut(
        profile=UserProfileOut.model_validate(profile),
        targets=TargetsOut(
            kcal=profile.target_calories,
            protein=profile.target_protein_g,
            fat=profile.target_fat_g,
            carbs=profile.target_carbs_g,
        ),
    )


def get_me(db: Session, user_id: str) -> UserMeOut:
    get_user(db, user_id)
    return profile_to_me(_get_profile(db, user_id))
