#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
YeetCode Backend - Core Data Models
Модели записей: пользователь, ежедневная задача, bounty, состояние приложения
"""

import math
from datetime import datetime
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
import logging

from database.records import as_int, as_str, as_str_list, is_completed

logger = logging.getLogger(__name__)

# Награда за одну выполненную ежедневную задачу
DAILY_XP_REWARD = 200

SECONDS_PER_DAY = 24 * 60 * 60

WELCOME_STEP = "welcome"
LEADERBOARD_STEP = "leaderboard"


# ===== ПОЛЬЗОВАТЕЛЬ =====

@dataclass
class UserRecord:
    """Запись пользователя в таблице Users"""
    username: str
    group_id: Optional[str] = None
    easy: int = 0
    medium: int = 0
    hard: int = 0
    today: int = 0
    xp: int = 0

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "UserRecord":
        return cls(
            username=as_str(data.get("username"), ""),
            group_id=as_str(data.get("group_id")),
            easy=as_int(data.get("easy")),
            medium=as_int(data.get("medium")),
            hard=as_int(data.get("hard")),
            today=as_int(data.get("today")),
            xp=as_int(data.get("xp")),
        )

    def to_leaderboard_row(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "name": self.username,
            "easy": self.easy,
            "medium": self.medium,
            "hard": self.hard,
            "today": self.today,
            "xp": self.xp,
        }


# ===== ЕЖЕДНЕВНАЯ ЗАДАЧА =====

@dataclass
class DailyChallenge:
    """Запись таблицы Daily, ключ - дата YYYY-MM-DD"""
    date: Optional[str]
    slug: Optional[str] = None
    title: Optional[str] = None
    frontend_id: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    users: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "DailyChallenge":
        users = data.get("users")
        return cls(
            date=as_str(data.get("date")),
            slug=as_str(data.get("slug")),
            title=as_str(data.get("title")),
            frontend_id=as_str(data.get("frontendId")),
            tags=as_str_list(data.get("tags")),
            users=users if isinstance(users, dict) else {},
        )

    def is_completed_by(self, username: str) -> bool:
        return is_completed(self.users.get(username))

    def fallback_details(self) -> Dict[str, Any]:
        """Описание задачи из сохраненных полей, если каталог недоступен"""
        return {
            "title": self.title,
            "titleSlug": self.slug,
            "questionFrontendId": self.frontend_id,
            "difficulty": "Unknown",
            "content": "Problem details unavailable",
            "topicTags": [{"name": tag} for tag in self.tags],
        }


def parse_daily_records(records: List[Dict[str, Any]]) -> List[DailyChallenge]:
    """Разбор записей Daily: без даты - отбрасываются, сортировка от новых к старым"""
    challenges = [DailyChallenge.from_record(record) for record in records]
    challenges = [challenge for challenge in challenges if challenge.date]
    challenges.sort(key=lambda challenge: challenge.date, reverse=True)
    return challenges


# ===== BOUNTY =====

@dataclass
class Bounty:
    """Ограниченное по времени задание с прогрессом по пользователям"""
    bounty_id: Optional[str]
    count: int = 0
    expirydate: int = 0
    startdate: int = 0
    xp: int = 0
    description: Optional[str] = None
    difficulty: Optional[str] = None
    name: Optional[str] = None
    title: Optional[str] = None
    type: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    users: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "Bounty":
        users = data.get("users")
        return cls(
            bounty_id=as_str(data.get("bountyId")),
            count=as_int(data.get("count")),
            expirydate=as_int(data.get("expirydate")),
            startdate=as_int(data.get("startdate")),
            xp=as_int(data.get("xp")),
            description=as_str(data.get("description")),
            difficulty=as_str(data.get("difficulty")),
            name=as_str(data.get("name")),
            title=as_str(data.get("title")),
            type=as_str(data.get("type")),
            tags=as_str_list(data.get("tags")),
            users=users if isinstance(users, dict) else {},
        )

    def progress_for(self, username: str) -> int:
        return as_int(self.users.get(username))

    def progress_percent(self, progress: int) -> float:
        if self.count <= 0:
            return 0.0
        return min(progress / self.count * 100, 100.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bountyId": self.bounty_id,
            "count": self.count,
            "expirydate": self.expirydate,
            "startdate": self.startdate,
            "xp": self.xp,
            "description": self.description,
            "difficulty": self.difficulty,
            "users": dict(self.users),
            "name": self.name,
            "tags": list(self.tags),
            "title": self.title,
            "type": self.type,
        }

    def annotate(self, username: str, now: int) -> Dict[str, Any]:
        """Словарь bounty с прогрессом пользователя и статусом по времени"""
        data = self.to_dict()
        progress = self.progress_for(username)
        data["userProgress"] = progress
        data["progressPercent"] = self.progress_percent(progress)

        data["isExpired"] = now > self.expirydate
        data["isActive"] = now >= self.startdate and not data["isExpired"]

        if data["isActive"]:
            data["timeRemaining"] = self.expirydate - now
            data["daysRemaining"] = math.ceil(data["timeRemaining"] / SECONDS_PER_DAY)
        return data


# ===== СОСТОЯНИЕ ПРИЛОЖЕНИЯ =====

@dataclass
class AppStateSnapshot:
    """Последнее известное состояние GUI (для решения об уведомлении)"""
    step: str = WELCOME_STEP
    user_data: Optional[Dict[str, Any]] = None
    daily_data: Optional[Dict[str, Any]] = None
    last_updated: Optional[str] = None

    @classmethod
    def welcome(cls) -> "AppStateSnapshot":
        return cls()

    @classmethod
    def capture(cls, step: str, user_data: Optional[Dict[str, Any]],
                daily_data: Optional[Dict[str, Any]], now: datetime) -> "AppStateSnapshot":
        return cls(step=step, user_data=user_data, daily_data=daily_data,
                   last_updated=now.isoformat())

    @property
    def username(self) -> Optional[str]:
        if isinstance(self.user_data, dict):
            return self.user_data.get("leetUsername") or None
        return None

    @property
    def daily_incomplete(self) -> bool:
        """Только явное dailyComplete == false, отсутствие значения не считается"""
        return isinstance(self.daily_data, dict) and self.daily_data.get("dailyComplete") is False

    def should_notify(self) -> bool:
        return self.step == LEADERBOARD_STEP and bool(self.username) and self.daily_incomplete

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "userData": self.user_data,
            "dailyData": self.daily_data,
            "lastUpdated": self.last_updated,
        }
