import unittest
from decimal import Decimal

from database.records import (
    as_int,
    as_str_list,
    deserialize_item,
    is_completed,
    serialize_item,
)


class DeserializeItemTest(unittest.TestCase):
    def test_daily_record_becomes_plain_values(self) -> None:
        raw = {
            "date": {"S": "2024-05-10"},
            "frontendId": {"S": "1"},
            "tags": {"SS": ["Hash Table", "Array"]},
            "users": {"M": {"alice": {"BOOL": True}, "bob": {"BOOL": False}}},
            "views": {"N": "42"},
        }
        item = deserialize_item(raw)

        self.assertEqual(item["date"], "2024-05-10")
        self.assertEqual(item["tags"], ["Array", "Hash Table"])
        self.assertEqual(item["users"], {"alice": True, "bob": False})
        self.assertEqual(item["views"], 42)
        self.assertIsInstance(item["views"], int)

    def test_malformed_attribute_is_dropped(self) -> None:
        item = deserialize_item({"date": {"S": "2024-05-10"}, "broken": {"XX": "?"}})
        self.assertEqual(item, {"date": "2024-05-10"})

    def test_empty_item(self) -> None:
        self.assertEqual(deserialize_item(None), {})

    def test_serialize_numbers_as_decimal_strings(self) -> None:
        typed = serialize_item({"username": "alice", "xp": 400, "users": {"alice": True}})
        self.assertEqual(typed["xp"], {"N": "400"})
        self.assertEqual(typed["users"], {"M": {"alice": {"BOOL": True}}})


class TolerantGetterTest(unittest.TestCase):
    def test_as_int(self) -> None:
        self.assertEqual(as_int(None), 0)
        self.assertEqual(as_int(7), 7)
        self.assertEqual(as_int(Decimal("12")), 12)
        self.assertEqual(as_int("15"), 15)
        self.assertEqual(as_int({"N": "9"}), 9)
        self.assertEqual(as_int("not-a-number"), 0)
        self.assertEqual(as_int(True), 0)

    def test_is_completed_accepts_both_encodings(self) -> None:
        self.assertTrue(is_completed(True))
        self.assertTrue(is_completed({"BOOL": True}))
        self.assertFalse(is_completed(False))
        self.assertFalse(is_completed({"BOOL": False}))
        self.assertFalse(is_completed(None))
        self.assertFalse(is_completed("true"))

    def test_as_str_list(self) -> None:
        self.assertEqual(as_str_list(["a", {"S": "b"}]), ["a", "b"])
        self.assertEqual(as_str_list(None), [])


if __name__ == "__main__":
    unittest.main()
