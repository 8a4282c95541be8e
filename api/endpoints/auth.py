"""
RecipeShare Authentication Endpoints
Registration, login, profile and password management
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from core.config import settings
from core.database import get_db
from core.dependencies import CurrentUser
from core.exceptions import APIError, bad_request, conflict, server_error
from middleware.logging import log_business_event, log_user_activity
from models.interactions import RecipeLike
from models.recipe_models import Recipe
from models.users import User
from schemas.auth_schemas import PasswordChange, UserLogin, UserRegister
from services.auth_service import auth_service
from services.user_service import user_service
from utils.responses import with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """
    Register a new user account

    Username and email are stored lower-cased and must be unique
    regardless of case.
    """
    try:
        if auth_service.find_by_email_or_username(db, user_data.email, user_data.username):
            raise conflict("User already exists", "Email or username is already taken")

        user = User(
            username=user_data.username.lower(),
            email=user_data.email.lower(),
            password_hash=auth_service.get_password_hash(user_data.password),
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            bio=user_data.bio,
            profile_image_url=user_data.profile_image_url,
        )
        db.add(user)
        db.commit()

        token = auth_service.create_access_token(user.id)
        log_business_event("user_registered", {"user_id": user.id, "username": user.username})

        return with_timestamp({
            "message": "User registered successfully",
            "user": user_service.public_user(user),
            "token": token,
            "expiresIn": settings.JWT_EXPIRES_IN,
        })

    except APIError:
        raise
    except IntegrityError:
        # Lost a race with a concurrent registration
        db.rollback()
        raise conflict("User already exists", "Email or username is already taken")
    except Exception as e:
        logger.error(f"Registration error: {str(e)}")
        db.rollback()
        raise server_error("Registration failed")


@router.post("/login")
async def login(login_data: UserLogin, db: Session = Depends(get_db)):
    """Authenticate by email or username and issue a token"""
    try:
        user = auth_service.authenticate_user(db, login_data.email_or_username, login_data.password)
        if not user:
            raise APIError(
                status.HTTP_401_UNAUTHORIZED, "Invalid credentials", "Email/username or password is incorrect"
            )

        token = auth_service.create_access_token(user.id)
        log_user_activity("login", {"user_id": user.id})

        return with_timestamp({
            "message": "Login successful",
            "user": user_service.public_user(user),
            "token": token,
            "expiresIn": settings.JWT_EXPIRES_IN,
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Login error: {str(e)}")
        raise server_error("Login failed")


@router.get("/profile")
async def get_profile(current_user: CurrentUser, db: Session = Depends(get_db)):
    """Current user's account with counts over all of their recipes"""
    try:
        recipe_count = db.query(func.count(Recipe.id)).filter(Recipe.author_id == current_user.id).scalar()
        total_likes = db.query(func.count()).select_from(RecipeLike).join(
            Recipe, Recipe.id == RecipeLike.recipe_id
        ).filter(Recipe.author_id == current_user.id).scalar()

        user = user_service.full_user(current_user)
        user["stats"] = {
            "recipeCount": recipe_count,
            "followersCount": user_service.followers_count(db, current_user.id),
            "followingCount": user_service.following_count(db, current_user.id),
            "totalLikes": total_likes,
        }
        return with_timestamp({"user": user})

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get profile for user {current_user.id}: {e}")
        raise server_error("Failed to get profile")


@router.put("/change-password")
async def change_password(password_data: PasswordChange, current_user: CurrentUser, db: Session = Depends(get_db)):
    """Replace the password after re-verifying the current one"""
    try:
        if not auth_service.verify_password(password_data.current_password, current_user.password_hash):
            raise bad_request("Invalid current password", "Current password is incorrect")

        current_user.password_hash = auth_service.get_password_hash(password_data.new_password)
        db.commit()
        log_user_activity("password_changed", {"user_id": current_user.id})

        return with_timestamp({"message": "Password changed successfully"})

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Password change failed for user {current_user.id}: {e}")
        db.rollback()
        raise server_error("Failed to change password")


@router.get("/verify")
async def verify_token(current_user: CurrentUser):
    """Confirm the bearer token is still accepted"""
    return with_timestamp({
        "message": "Token is valid",
        "user": {
            "id": current_user.id,
            "username": current_user.username,
            "email": current_user.email,
            "firstName": current_user.first_name,
            "lastName": current_user.last_name,
            "isVerified": current_user.is_verified,
        },
    })
