# services/leetcode_client.py

"""
Клиент каталога задач LeetCode (GraphQL)
"""

import logging
import random
from typing import Any, Dict, List, Optional

import aiohttp

from core.exceptions import CatalogError, NoEligibleProblemsError, ProblemNotFoundError

logger = logging.getLogger(__name__)

QUESTION_LIST_QUERY = """
    query problemsetQuestionList($categorySlug: String, $limit: Int, $skip: Int, $filters: QuestionListFilterInput) {
      problemsetQuestionList: questionList(
        categorySlug: $categorySlug
        limit: $limit
        skip: $skip
        filters: $filters
      ) {
        total: totalNum
        questions: data {
          title
          titleSlug
          difficulty
          frontendQuestionId: questionFrontendId
          paidOnly: isPaidOnly
          topicTags {
            name
          }
        }
      }
    }
"""

QUESTION_DETAIL_QUERY = """
    query getQuestionDetail($titleSlug: String!) {
      question(titleSlug: $titleSlug) {
        title
        titleSlug
        questionFrontendId
        difficulty
        content
        topicTags {
          name
        }
        hints
        sampleTestCase
      }
    }
"""

QUESTION_LIST_LIMIT = 1000


class LeetCodeClient:
    """Одиночные запросы к GraphQL без повторов и кэширования"""

    def __init__(self, url: str = "https://leetcode.com/graphql", user_agent: str = "YeetCode/1.0",
                 timeout: int = 30, session: Optional[aiohttp.ClientSession] = None,
                 rng: Optional[random.Random] = None):
        self.url = url
        self.user_agent = user_agent
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None
        self.rng = rng or random.Random()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def execute(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """POST запроса; тело с errors считается ошибкой"""
        session = await self._get_session()
        headers = {
            'Content-Type': 'application/json',
            'User-Agent': self.user_agent,
        }
        try:
            async with session.post(self.url, json={'query': query, 'variables': variables},
                                    headers=headers) as response:
                logger.debug(f"🌐 LeetCode GraphQL: статус {response.status}")
                response.raise_for_status()
                payload = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise CatalogError(f"LeetCode request failed: {e}") from e

        if not isinstance(payload, dict):
            raise CatalogError("Unexpected GraphQL response", payload)

        errors = payload.get('errors')
        if errors:
            logger.error(f"❌ Ошибки GraphQL: {errors}")
            raise CatalogError(f"GraphQL query failed: {errors}", errors)

        return payload.get('data') or {}

    async def fetch_random_by_difficulty(self, difficulty: str) -> Dict[str, Any]:
        """Случайная бесплатная задача заданной сложности"""
        variables = {
            'categorySlug': '',
            'limit': QUESTION_LIST_LIMIT,
            'skip': 0,
            'filters': {'difficulty': difficulty},
        }
        data = await self.execute(QUESTION_LIST_QUERY, variables)
        question_list = data.get('problemsetQuestionList') or {}
        questions: List[Dict[str, Any]] = question_list.get('questions') or []

        free_problems = [problem for problem in questions if not problem.get('paidOnly')]
        logger.info(f"🎲 Найдено {len(free_problems)} бесплатных задач ({difficulty})")

        if not free_problems:
            raise NoEligibleProblemsError("No free problems found")

        problem = self.rng.choice(free_problems)
        logger.info(f"🎯 Выбрана задача: {problem.get('title')}")
        return problem

    async def fetch_details(self, slug: str) -> Dict[str, Any]:
        """Полное описание задачи по slug"""
        data = await self.execute(QUESTION_DETAIL_QUERY, {'titleSlug': slug})
        question = data.get('question')
        if not question:
            raise ProblemNotFoundError(f"Question not found: {slug}")
        logger.debug(f"📄 Получено описание задачи: {question.get('title')}")
        return question
