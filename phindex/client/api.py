"""Async HTTP client for the Phindex API."""

from typing import Any, Optional

import httpx
from loguru import logger

from phindex.config import API_TIMEOUT, PHINDEX_API_URL
from phindex.services.catalog import PHENOTYPE
from phindex.services.tally import Tally, VoteShare


class PhindexAPIError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, detail: Any = None):
        self.status_code = status_code
        self.detail = detail
        message = detail.get("message") if isinstance(detail, dict) else detail
        super().__init__(str(message or f"HTTP {status_code}"))


# errors any request can fail with
REQUEST_ERRORS = (PhindexAPIError, httpx.HTTPError)


def to_tally(data: dict) -> Tally:
    return Tally(
        votes=[
            VoteShare(v["classification"], int(v["count"]), float(v["percentage"]))
            for v in data.get("votes") or []
        ],
        user_vote=data.get("user_vote"),
    )


class PhindexClient:
    """Thin wrapper over ``httpx.AsyncClient``; pass ``transport`` to talk to an app in-process."""

    def __init__(
        self,
        base_url: str = PHINDEX_API_URL,
        token: Optional[str] = None,
        *,
        timeout: float = API_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(method, path, **kwargs)
        if response.is_error:
            try:
                body = response.json()
                detail = body.get("detail") if isinstance(body, dict) else body
            except ValueError:
                detail = response.text
            logger.debug("{} {} -> {} {}", method, path, response.status_code, detail)
            raise PhindexAPIError(response.status_code, detail)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.debug("{} {} -> {} with a non-JSON body", method, path, response.status_code)
            raise PhindexAPIError(response.status_code, "Unexpected response from the server")

    # votes

    async def fetch_tally(self, profile_id: int, characteristic_type: str = PHENOTYPE) -> Tally:
        data = await self._request(
            "GET", f"/votes/{profile_id}", params={"characteristic_type": characteristic_type}
        )
        return to_tally(data)

    async def cast_vote(self, profile_id: int, classification: str, characteristic_type: str = PHENOTYPE) -> None:
        # the tally in the reply is not used; trackers refetch after every write
        await self._request(
            "PUT",
            f"/votes/{profile_id}",
            json={"classification": classification, "characteristic_type": characteristic_type},
        )

    async def change_vote(self, profile_id: int, classification: str, characteristic_type: str = PHENOTYPE) -> None:
        await self._request(
            "PATCH",
            f"/votes/{profile_id}",
            json={"classification": classification, "characteristic_type": characteristic_type},
        )

    async def geographic_votes(self, profile_id: int) -> dict:
        return await self._request("GET", f"/votes/{profile_id}/geographic")

    async def physical_votes(self, profile_id: int) -> dict:
        return await self._request("GET", f"/votes/{profile_id}/physical")

    # game

    async def game_round(self, difficulty: str = "medium") -> list[dict]:
        data = await self._request("GET", "/game/round", params={"difficulty": difficulty})
        return data["profiles"]

    async def save_game_result(self, score: int, total_questions: int, difficulty: str) -> dict:
        return await self._request(
            "POST",
            "/game/results",
            json={"score": score, "total_questions": total_questions, "difficulty": difficulty},
        )

    async def game_stats(self) -> dict:
        return await self._request("GET", "/game/stats")

    async def leaderboard(self) -> list[dict]:
        return await self._request("GET", "/leaderboard")
