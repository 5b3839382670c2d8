import unittest

import boto3
from botocore.stub import ANY, Stubber

from core.exceptions import ConditionFailed, StoreError
from database.store import RecordStore, Update, compile_filter, compile_update


def make_client():
    return boto3.client(
        "dynamodb",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


class CompileExpressionTest(unittest.TestCase):
    def test_set_nested_map_entry(self) -> None:
        expression, names, values = compile_update(Update(assign={("users", "alice.smith"): True}))
        self.assertEqual(expression, "SET #n0.#n1 = :v0")
        self.assertEqual(names, {"#n0": "users", "#n1": "alice.smith"})
        self.assertEqual(values, {":v0": {"BOOL": True}})

    def test_add_and_remove_clauses(self) -> None:
        expression, names, values = compile_update(Update(increment={"xp": 200}, remove=["group_id"]))
        self.assertEqual(expression, "ADD #n0 :v0 REMOVE #n1")
        self.assertEqual(names, {"#n0": "xp", "#n1": "group_id"})
        self.assertEqual(values, {":v0": {"N": "200"}})

    def test_empty_update_rejected(self) -> None:
        with self.assertRaises(ValueError):
            compile_update(Update())

    def test_filter(self) -> None:
        expression, names, values = compile_filter({"group_id": "12345"})
        self.assertEqual(expression, "#f0 = :f0")
        self.assertEqual(names, {"#f0": "group_id"})
        self.assertEqual(values, {":f0": {"S": "12345"}})


class RecordStoreTest(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.client = make_client()
        self.stubber = Stubber(self.client)
        self.stubber.activate()
        self.store = RecordStore(client=self.client)

    def tearDown(self) -> None:
        self.stubber.deactivate()

    async def test_get_decodes_item(self) -> None:
        self.stubber.add_response(
            "get_item",
            {"Item": {"username": {"S": "alice"}, "xp": {"N": "400"}}},
            {"TableName": "Users", "Key": {"username": {"S": "alice"}}},
        )
        item = await self.store.get("Users", {"username": "alice"})
        self.assertEqual(item, {"username": "alice", "xp": 400})
        self.stubber.assert_no_pending_responses()

    async def test_get_missing_item(self) -> None:
        self.stubber.add_response("get_item", {}, {"TableName": "Users", "Key": ANY})
        self.assertIsNone(await self.store.get("Users", {"username": "nobody"}))

    async def test_conditional_put_conflict(self) -> None:
        self.stubber.add_client_error(
            "put_item",
            service_error_code="ConditionalCheckFailedException",
            http_status_code=400,
            expected_params={
                "TableName": "Groups",
                "Item": {"group_id": {"S": "12345"}, "created_at": {"S": "2024-05-10T12:00:00"}},
                "ConditionExpression": "attribute_not_exists(#k)",
                "ExpressionAttributeNames": {"#k": "group_id"},
            },
        )
        with self.assertRaises(ConditionFailed):
            await self.store.put(
                "Groups",
                {"group_id": "12345", "created_at": "2024-05-10T12:00:00"},
                unless_exists="group_id",
            )

    async def test_other_client_errors_are_store_errors(self) -> None:
        self.stubber.add_client_error("update_item", service_error_code="ResourceNotFoundException")
        with self.assertRaises(StoreError) as ctx:
            await self.store.update("Users", {"username": "alice"}, Update(assign={"xp": 0}))
        self.assertNotIsInstance(ctx.exception, ConditionFailed)
        self.assertEqual(ctx.exception.code, "ResourceNotFoundException")

    async def test_scan_follows_pagination(self) -> None:
        self.stubber.add_response(
            "scan",
            {"Items": [{"date": {"S": "2024-05-10"}}], "LastEvaluatedKey": {"date": {"S": "2024-05-10"}}},
            {"TableName": "Daily"},
        )
        self.stubber.add_response(
            "scan",
            {"Items": [{"date": {"S": "2024-05-09"}}]},
            {"TableName": "Daily", "ExclusiveStartKey": {"date": {"S": "2024-05-10"}}},
        )
        items = await self.store.scan("Daily")
        self.assertEqual([item["date"] for item in items], ["2024-05-10", "2024-05-09"])

    async def test_query_on_index(self) -> None:
        self.stubber.add_response(
            "query",
            {"Items": [{"username": {"S": "alice"}, "group_id": {"S": "12345"}}]},
            {
                "TableName": "Users",
                "IndexName": "group_id-index",
                "KeyConditionExpression": "#k = :k",
                "ExpressionAttributeNames": {"#k": "group_id"},
                "ExpressionAttributeValues": {":k": {"S": "12345"}},
            },
        )
        items = await self.store.query("Users", "group_id-index", "group_id", "12345")
        self.assertEqual(items, [{"username": "alice", "group_id": "12345"}])


if __name__ == "__main__":
    unittest.main()
