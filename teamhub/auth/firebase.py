"""Firebase ID token verification"""

import logging
import re
import time
from typing import Optional, Dict, Tuple

import httpx
from jose import JWTError, jwt

from teamhub.config import settings

logger = logging.getLogger(__name__)

MAX_AGE_PATTERN = re.compile(r"max-age=(\d+)")


class FirebaseAuthService:
    """Verifies Firebase ID tokens against Google's published certificates

    Certificates are cached for the ``max-age`` Google sends with them. A token
    signed with an unknown key id triggers at most one refetch per
    ``MIN_REFETCH_INTERVAL`` seconds.
    """

    CERTS_URL = "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
    ISSUER_PREFIX = "https://securetoken.google.com/"
    ALGORITHM = "RS256"
    DEFAULT_CERT_TTL = 3600
    MIN_REFETCH_INTERVAL = 60

    def __init__(self, project_id: Optional[str] = None, clock=time.monotonic):
        self.project_id = project_id
        self._clock = clock
        self._certs: Dict[str, str] = {}
        self._expires_at = 0.0
        self._fetched_at: Optional[float] = None

    @property
    def enabled(self) -> bool:
        return bool(self.project_id)

    async def _download_certs(self) -> Tuple[Dict[str, str], int]:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(self.CERTS_URL)
            response.raise_for_status()
        match = MAX_AGE_PATTERN.search(response.headers.get("cache-control", ""))
        max_age = int(match.group(1)) if match else self.DEFAULT_CERT_TTL
        return response.json(), max_age

    def _store_certs(self, certs: Dict[str, str], max_age: int):
        now = self._clock()
        self._certs = certs
        self._fetched_at = now
        self._expires_at = now + max_age

    async def _fetch_certs(self) -> Dict[str, str]:
        certs, max_age = await self._download_certs()
        self._store_certs(certs, max_age)
        logger.info(f"Fetched {len(certs)} Firebase certificates, cached for {max_age}s")
        return self._certs

    async def _get_cert(self, kid: str) -> Optional[str]:
        now = self._clock()
        if not self._certs or now >= self._expires_at:
            await self._fetch_certs()
        elif kid not in self._certs and now - self._fetched_at >= self.MIN_REFETCH_INTERVAL:
            # key rotation: Google may have published a new key before our copy expired
            await self._fetch_certs()
        return self._certs.get(kid)

    async def verify_id_token(self, token: str) -> Optional[dict]:
        """Return the decoded claims of a valid Firebase ID token, None otherwise"""
        if not self.enabled:
            return None

        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            return None

        if header.get("alg") != self.ALGORITHM or not header.get("kid"):
            return None

        try:
            cert = await self._get_cert(header["kid"])
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch Firebase certificates: {e}")
            return None
        if not cert:
            logger.warning(f"No Firebase certificate for key id {header['kid']}")
            return None

        try:
            claims = jwt.decode(
                token,
                cert,
                algorithms=[self.ALGORITHM],
                audience=self.project_id,
                issuer=f"{self.ISSUER_PREFIX}{self.project_id}",
                options={"verify_at_hash": False}
            )
        except JWTError as e:
            logger.warning(f"Firebase token verification failed: {e}")
            return None

        if not claims.get("sub") or not claims.get("email"):
            return None
        return claims


firebase_auth = FirebaseAuthService(settings.firebase_project_id)
