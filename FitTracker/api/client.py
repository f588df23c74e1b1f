"""
High-level API client for the FitTracker backend.
Groups the auth, workout and goal endpoints on top of the request pipeline.
"""

from typing import Any, Dict, List, Optional

from .pipeline import RequestPipeline


class FitTrackerAPIClient:
    """
    Endpoint wrapper for the FitTracker API.

    Every method returns the decoded JSON body and raises the pipeline's
    errors unchanged.
    """

    def __init__(self, pipeline: RequestPipeline):
        self._pipeline = pipeline

    @property
    def pipeline(self) -> RequestPipeline:
        return self._pipeline

    # Auth

    async def register(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Register a new account.

        Args:
            data: name, email, password and optional age/weight/height/goal

        Returns:
            dict: ``{"token": ..., "user": {...}}``
        """
        return await self._pipeline.post("/auth/register", data)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Exchange credentials for a token.

        Returns:
            dict: ``{"token": ..., "user": {...}}``
        """
        return await self._pipeline.post("/auth/login", {"email": email, "password": password})

    async def get_profile(self) -> Dict[str, Any]:
        return await self._pipeline.get("/auth/profile")

    async def update_profile(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Update the profile; the response carries the stored ``user``."""
        return await self._pipeline.put("/auth/profile", data)

    # Workouts

    async def list_workouts(self) -> List[Dict[str, Any]]:
        return await self._pipeline.get("/workouts")

    async def get_workout(self, workout_id: str) -> Dict[str, Any]:
        return await self._pipeline.get(f"/workouts/{workout_id}")

    async def create_workout(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._pipeline.post("/workouts", data)

    async def update_workout(self, workout_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._pipeline.put(f"/workouts/{workout_id}", data)

    async def delete_workout(self, workout_id: str) -> Optional[Dict[str, Any]]:
        return await self._pipeline.delete(f"/workouts/{workout_id}")

    async def get_workout_stats(self) -> Dict[str, Any]:
        return await self._pipeline.get("/workouts/stats/summary")

    # Goals

    async def list_goals(self) -> List[Dict[str, Any]]:
        return await self._pipeline.get("/goals")

    async def create_goal(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._pipeline.post("/goals", data)

    async def update_goal(self, goal_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._pipeline.put(f"/goals/{goal_id}", data)

    async def delete_goal(self, goal_id: str) -> Optional[Dict[str, Any]]:
        return await self._pipeline.delete(f"/goals/{goal_id}")


__all__ = ["FitTrackerAPIClient"]
