from __future__ import annotations
import re
from pathlib import Path
from typing import List, Optional
from models import AppState
from storage import data_path, load_json, save_json

PROFILES_FILE = "profiles.json"


def _sanitize_profile_name(name: str) -> str:
    safe = re.sub(r"[^A-Za-z0-9_-]+", "_", name.strip())
    safe = safe.strip("_") or "default"
    return safe[:80]


class ProfileRepository:
    """One JSON state file per user profile, plus an index of profile names."""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = data_path("", base_dir)

    def _profile_path(self, profile_name: str) -> Path:
        return self.base_dir / f"state__{_sanitize_profile_name(profile_name)}.json"

    def _save_profiles_list(self, profiles: List[str]) -> None:
        save_json(self.base_dir / PROFILES_FILE, {"profiles": profiles})

    def list_profiles(self) -> List[str]:
        data = load_json(self.base_dir / PROFILES_FILE, {"profiles": []})
        profiles: List[str] = [p for p in data.get("profiles", []) if isinstance(p, str)]

        # Discover any files on disk not in the list
        discovered = []
        for path in sorted(self.base_dir.glob("state__*.json")):
            suffix = path.stem.replace("state__", "", 1)
            discovered.append(suffix or "default")

        combined = []
        for name in profiles + discovered:
            if name and name not in combined:
                combined.append(name)

        if not combined:
            combined = ["default"]
            self._save_profiles_list(combined)

        return combined

    def exists(self, profile_name: str) -> bool:
        return self._profile_path(profile_name).exists()

    def load(self, profile_name: str) -> AppState:
        """
        Load a profile's state. A missing profile yields an empty state;
        out-of-range records raise pydantic's ValidationError.
        """
        default_state = AppState(profile=profile_name)
        raw = load_json(self._profile_path(profile_name), default_state.model_dump(mode="json"))
        state = AppState.model_validate(raw)
        state.profile = profile_name
        return state

    def save(self, profile_name: str, state: AppState) -> None:
        state.profile = profile_name
        save_json(self._profile_path(profile_name), state.model_dump(mode="json"))
        profiles = self.list_profiles()
        if profile_name not in profiles:
            profiles.append(profile_name)
            self._save_profiles_list(profiles)

    def create(self, profile_name: str) -> AppState:
        name = profile_name.strip()
        if not name:
            raise ValueError("Profile name cannot be empty.")

        profiles = self.list_profiles()
        if any(p.lower() == name.lower() for p in profiles if self.exists(p)):
            raise ValueError("Profile already exists.")

        if self.exists(name):
            raise ValueError("A profile with that name already exists on disk.")

        state = AppState(profile=name)
        self.save(name, state)
        return state

    def delete(self, profile_name: str) -> None:
        try:
            self._profile_path(profile_name).unlink()
        except FileNotFoundError:
            pass

        profiles = [p for p in self.list_profiles() if p != profile_name]
        if not profiles:
            profiles = ["default"]
        self._save_profiles_list(profiles)
