#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
YeetCode Backend - Record Store
Асинхронный клиент DynamoDB: get / put / update / query / scan

Вызовы boto3 блокирующие, поэтому выполняются в пуле потоков.
Кодирование атрибутов - только здесь, через database.records.
"""

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import ConditionFailed, StoreError
from database.records import deserialize_item, deserialize_items, serialize_item, serialize_value

logger = logging.getLogger(__name__)

AttrPath = Union[str, Tuple[str, ...]]


@dataclass
class Update:
    """Декларативное описание UpdateExpression.

    assign    - SET path = value
    increment - ADD path value (аддитивно, создает атрибут при отсутствии)
    remove    - REMOVE path
    Путь - имя атрибута или кортеж для вложенных ключей map,
    например ("users", "alice").
    """
    assign: Dict[AttrPath, Any] = field(default_factory=dict)
    increment: Dict[AttrPath, Union[int, float]] = field(default_factory=dict)
    remove: List[AttrPath] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.assign or self.increment or self.remove)


def _as_path(path: AttrPath) -> Tuple[str, ...]:
    return (path,) if isinstance(path, str) else tuple(path)


class _ExpressionBuilder:
    """Плейсхолдеры #nX / :vX, чтобы любые имена (username) были безопасны"""

    def __init__(self, name_prefix: str = "n", value_prefix: str = "v"):
        self.name_prefix = name_prefix
        self.value_prefix = value_prefix
        self.names: Dict[str, str] = {}
        self.values: Dict[str, Dict[str, Any]] = {}
        self._name_index: Dict[str, str] = {}

    def name(self, attr: str) -> str:
        placeholder = self._name_index.get(attr)
        if placeholder is None:
            placeholder = f"#{self.name_prefix}{len(self._name_index)}"
            self._name_index[attr] = placeholder
            self.names[placeholder] = attr
        return placeholder

    def path(self, path: AttrPath) -> str:
        return ".".join(self.name(part) for part in _as_path(path))

    def value(self, value: Any) -> str:
        placeholder = f":{self.value_prefix}{len(self.values)}"
        self.values[placeholder] = serialize_value(value)
        return placeholder


def compile_update(update: Update) -> Tuple[str, Dict[str, str], Dict[str, Dict[str, Any]]]:
    """Update -> (UpdateExpression, ExpressionAttributeNames, ExpressionAttributeValues)"""
    if update.is_empty():
        raise ValueError("Пустой Update")

    builder = _ExpressionBuilder()
    clauses = []

    if update.assign:
        parts = [f"{builder.path(p)} = {builder.value(v)}" for p, v in update.assign.items()]
        clauses.append("SET " + ", ".join(parts))
    if update.increment:
        parts = [f"{builder.path(p)} {builder.value(v)}" for p, v in update.increment.items()]
        clauses.append("ADD " + ", ".join(parts))
    if update.remove:
        clauses.append("REMOVE " + ", ".join(builder.path(p) for p in update.remove))

    return " ".join(clauses), builder.names, builder.values


def compile_filter(filter_eq: Dict[str, Any]) -> Tuple[str, Dict[str, str], Dict[str, Dict[str, Any]]]:
    """{attr: value} -> FilterExpression из равенств, соединенных AND"""
    builder = _ExpressionBuilder(name_prefix="f", value_prefix="f")
    parts = [f"{builder.name(attr)} = {builder.value(value)}" for attr, value in filter_eq.items()]
    return " AND ".join(parts), builder.names, builder.values


class RecordStore:
    """Клиент хранилища записей поверх boto3 DynamoDB"""

    def __init__(self, client=None, region: Optional[str] = None,
                 executor: Optional[ThreadPoolExecutor] = None):
        self._client = client
        self.region = region
        self.executor = executor

    @property
    def client(self):
        """boto3-клиент создается при первом обращении"""
        if self._client is None:
            self._client = boto3.client('dynamodb', region_name=self.region)
        return self._client

    async def _call(self, operation: str, **params) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        try:
            method = getattr(self.client, operation)
            return await loop.run_in_executor(self.executor, functools.partial(method, **params))
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code')
            if code == 'ConditionalCheckFailedException':
                raise ConditionFailed(str(e), code) from e
            logger.error(f"❌ DynamoDB {operation} ({params.get('TableName')}) завершился ошибкой {code}: {e}")
            raise StoreError(str(e), code) from e
        except BotoCoreError as e:
            logger.error(f"❌ DynamoDB {operation} ({params.get('TableName')}) недоступен: {e}")
            raise StoreError(str(e)) from e

    async def get(self, table: str, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        response = await self._call('get_item', TableName=table, Key=serialize_item(key))
        raw = response.get('Item')
        return deserialize_item(raw) if raw else None

    async def put(self, table: str, item: Dict[str, Any], unless_exists: Optional[str] = None) -> None:
        """Запись item; с unless_exists - только если атрибута-ключа еще нет"""
        params = {'TableName': table, 'Item': serialize_item(item)}
        if unless_exists:
            params['ConditionExpression'] = 'attribute_not_exists(#k)'
            params['ExpressionAttributeNames'] = {'#k': unless_exists}
        await self._call('put_item', **params)

    async def update(self, table: str, key: Dict[str, Any], update: Update) -> None:
        expression, names, values = compile_update(update)
        params = {
            'TableName': table,
            'Key': serialize_item(key),
            'UpdateExpression': expression,
            'ExpressionAttributeNames': names,
        }
        if values:
            params['ExpressionAttributeValues'] = values
        await self._call('update_item', **params)

    async def query(self, table: str, index: str, key_name: str, key_value: Any) -> List[Dict[str, Any]]:
        params = {
            'TableName': table,
            'IndexName': index,
            'KeyConditionExpression': '#k = :k',
            'ExpressionAttributeNames': {'#k': key_name},
            'ExpressionAttributeValues': {':k': serialize_value(key_value)},
        }
        return await self._paginate('query', params)

    async def scan(self, table: str, filter_eq: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {'TableName': table}
        if filter_eq:
            expression, names, values = compile_filter(filter_eq)
            params['FilterExpression'] = expression
            params['ExpressionAttributeNames'] = names
            params['ExpressionAttributeValues'] = values
        return await self._paginate('scan', params)

    async def _paginate(self, operation: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        start_key = None
        while True:
            page_params = dict(params)
            if start_key:
                page_params['ExclusiveStartKey'] = start_key
            response = await self._call(operation, **page_params)
            items.extend(deserialize_items(response.get('Items')))
            start_key = response.get('LastEvaluatedKey')
            if not start_key:
                break
        logger.debug(f"📂 {operation} {params['TableName']}: {len(items)} записей")
        return items
