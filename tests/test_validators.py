"""Tests for attribute validation helpers"""

import unittest
from dataclasses import dataclass, field
from typing import List, Optional

from junos_provider.resources import validators


@dataclass
class Block:
    name: str = ""
    count: Optional[int] = None
    flag: bool = False
    items: List[str] = field(default_factory=list)


class TestValidators(unittest.TestCase):

    def test_validate_name(self):
        self.assertEqual(validators.validate_name("p1", "name"), [])
        self.assertEqual(validators.validate_name("", "name"), ["name must be set"])
        self.assertEqual(len(validators.validate_name("a" * 65, "name")), 1)
        issues = validators.validate_name("bad name", "name")
        self.assertIn("contains characters outside", issues[0])

    def test_validate_int_range(self):
        self.assertEqual(validators.validate_int_range(None, "port", 1, 10), [])
        self.assertEqual(validators.validate_int_range(1, "port", 1, 10), [])
        self.assertEqual(
            validators.validate_int_range(11, "port", 1, 10),
            ["port must be between 1 and 10, got 11"],
        )

    def test_validate_one_of(self):
        self.assertEqual(validators.validate_one_of("", "mode", ("a", "b")), [])
        self.assertEqual(validators.validate_one_of("a", "mode", ("a", "b")), [])
        self.assertEqual(
            validators.validate_one_of("c", "mode", ("a", "b")),
            ["mode must be one of a, b, got \"c\""],
        )

    def test_validate_address(self):
        self.assertEqual(validators.validate_address("192.0.2.1", "addr"), [])
        self.assertEqual(validators.validate_address("2001:db8::1", "addr"), [])
        self.assertEqual(len(validators.validate_address("192.0.2.300", "addr")), 1)
        self.assertEqual(validators.validate_address("192.0.2.0/24", "prefix", with_prefix=True), [])
        self.assertIn(
            "CIDR",
            validators.validate_address("192.0.2.0", "prefix", with_prefix=True)[0],
        )

    def test_conflicts(self):
        block = Block(flag=True, items=["x"])
        self.assertEqual(
            validators.conflicts(block, "flag", ("items", "count"), "test block"),
            ["flag and items cannot be configured together in test block"],
        )
        self.assertEqual(validators.conflicts(Block(items=["x"]), "flag", ("items",)), [])

    def test_one_of_helpers(self):
        self.assertEqual(len(validators.exactly_one_of(Block(), ("flag", "count"))), 1)
        self.assertEqual(validators.exactly_one_of(Block(count=0), ("flag", "count")), [])
        self.assertEqual(len(validators.at_most_one_of(Block(count=1, flag=True), ("flag", "count"))), 1)
        self.assertEqual(len(validators.required_together(Block(count=1), ("flag", "count"))), 1)
        self.assertEqual(validators.required_together(Block(), ("flag", "count")), [])

    def test_block_is_empty(self):
        self.assertTrue(validators.block_is_empty(Block()))
        self.assertTrue(validators.block_is_empty(Block(name="x"), exclude=("name",)))
        self.assertFalse(validators.block_is_empty(Block(count=0)))

    def test_duplicates(self):
        self.assertEqual(validators.duplicates(["a", "b", "a", "a", "c", "b"]), ["a", "b"])
        self.assertEqual(validators.duplicates([]), [])


if __name__ == '__main__':
    unittest.main()
