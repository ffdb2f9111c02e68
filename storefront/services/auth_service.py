# storefront/services/auth_service.py
import logging

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.clients.base import FunctionsApi
from storefront.core.auth import ROLE_ADMIN, ROLE_CUSTOMER
from storefront.core.config import get_settings
from storefront.core.security import (
    create_access_token,
    hash_password,
    is_password_hash,
    legacy_sha256_matches,
    looks_like_legacy_sha256,
    plaintext_equals,
    verify_password,
)
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.customer import CUSTOMER_PARTITION, Customer
from storefront.schemas.user import LoginRequest, RegisterRequest, TokenResponse

logger = logging.getLogger(__name__)

settings = get_settings()

INVALID_CREDENTIALS = "Invalid username or password."


class AuthService:
    """
    Registration and login against the local `users` table.

    Responsibilities:
      - hash passwords on register; reject duplicate usernames
      - create the matching customer record through the API client
        (best effort, failures are only logged)
      - verify credentials on login, upgrading legacy stored values
      - issue bearer tokens carrying username, role and customer id
    """

    def __init__(self, repo: UserRepository, api: FunctionsApi):
        self.repo = repo
        self.api = api

    # ----- helpers -----

    def _check_password(self, session: Session, user: User, password: str) -> bool:
        """
        Verify `password` for `user`, in this order:
          1. passlib hash (rehash if the scheme is deprecated)
          2. unsalted base64 SHA-256 from old accounts -> rehash
          3. plain text, only when LEGACY_PLAINTEXT_MIGRATION is on -> rehash

        Any successful upgrade is persisted before returning, so the old
        stored value never matches again.
        """
        stored = user.password_hash

        if is_password_hash(stored):
            ok, new_hash = verify_password(password, stored)
            if ok and new_hash:
                self._store_hash(session, user, new_hash, "deprecated scheme")
            return ok

        if legacy_sha256_matches(password, stored):
            self._store_hash(session, user, hash_password(password), "legacy sha256")
            return True

        if (
            settings.LEGACY_PLAINTEXT_MIGRATION
            and not looks_like_legacy_sha256(stored)
            and plaintext_equals(password, stored)
        ):
            self._store_hash(session, user, hash_password(password), "plain text")
            return True

        return False

    def _store_hash(self, session: Session, user: User, new_hash: str, source: str) -> None:
        user.password_hash = new_hash
        self.repo.update(session, user)
        logger.info("Upgraded stored password for %s (%s)", user.username, source)

    def _issue_token(self, user: User, customer_id: str) -> TokenResponse:
        return TokenResponse(
            access_token=create_access_token(user.username, user.role, customer_id),
            username=user.username,
            role=user.role,
            customer_id=customer_id,
        )

    # ----- public operations -----

    def register(self, session: Session, payload: RegisterRequest) -> TokenResponse:
        """
        Create a local user and its customer record, then sign in.

        Rules:
          - Admin self-registration only when ALLOW_ADMIN_REGISTRATION
          - username must be unused (409)
          - customer record creation is best effort; without it the
            username stands in as customer id
        """
        if payload.role == ROLE_ADMIN and not settings.ALLOW_ADMIN_REGISTRATION:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin registration is disabled",
            )

        if self.repo.get_by_username(session, payload.username) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Username already exists.",
            )

        user = self.repo.create(
            session,
            User(
                username=payload.username,
                password_hash=hash_password(payload.password),
                role=payload.role,
            ),
        )
        logger.info("Registered %s as %s", user.username, user.role)

        customer_id = user.username
        if user.role == ROLE_CUSTOMER:
            created = self.api.create_customer(
                Customer(
                    partition_key=CUSTOMER_PARTITION,
                    name=payload.first_name,
                    surname=payload.last_name,
                    username=payload.username,
                    email=str(payload.email),
                    shipping_address=payload.shipping_address,
                )
            )
            if created is None:
                logger.warning("Customer record for %s could not be created", user.username)
            else:
                customer_id = created.row_key

        return self._issue_token(user, customer_id)

    def login(self, session: Session, payload: LoginRequest) -> TokenResponse:
        user = self.repo.get_by_username(session, payload.username)
        if user is None or not self._check_password(session, user, payload.password):
            logger.info("Failed login for %s", payload.username)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=INVALID_CREDENTIALS,
            )

        customer = self.api.get_customer_by_username(user.username)
        if customer is None:
            # gateway down or no record yet: the username stands in as id
            customer_id = user.username
        else:
            customer_id = customer.row_key

        logger.info("Login for %s (%s)", user.username, user.role)
        return self._issue_token(user, customer_id)
