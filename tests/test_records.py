import pytest
from pydantic import ValidationError

from chocolate import AccountRef, ArithmeticOverflow, Project, Review, ReviewKey, VerifyDetails
from chocolate.encoding import U32_MAX, canonicalize, checked_add_u32, decanonicalize, u32_be


def acct(byte: int) -> AccountRef:
    return AccountRef(bytes([byte]) * 32)


class TestAccountRef:

    def test_requires_32_bytes(self):
        with pytest.raises(ValueError):
            AccountRef(b"\x01" * 31)
        with pytest.raises(TypeError):
            AccountRef("not bytes")

    def test_hex_round_trip(self):
        a = acct(0xAB)
        assert AccountRef.from_hex(a.hex()) == a
        assert AccountRef.from_hex(str(a)) == a
        assert a.encode() == b"\xab" * 32

    def test_ordering_is_bytewise(self):
        assert acct(1) < acct(2)
        assert sorted([acct(3), acct(1), acct(2)]) == [acct(1), acct(2), acct(3)]

    def test_review_key_orders_by_owner_then_project(self):
        keys = [ReviewKey(acct(2), 0), ReviewKey(acct(1), 5), ReviewKey(acct(1), 2)]
        assert sorted(keys) == [ReviewKey(acct(1), 2), ReviewKey(acct(1), 5), ReviewKey(acct(2), 0)]
        assert ReviewKey.from_list(keys[0].to_list()) == keys[0]


class TestRecords:

    def test_project_defaults(self):
        project = Project(owner=acct(1))
        assert project.review_count == 0
        assert project.rating_sum == 0
        assert project.meta == b""
        assert Project.from_dict(project.to_dict()) == project

    def test_u32_fields_validated(self):
        with pytest.raises(ValidationError):
            Project(owner=acct(1), review_count=-1)
        with pytest.raises(ValidationError):
            Review(id=0, rating=U32_MAX + 1, owner=acct(1))
        with pytest.raises(ValidationError):
            VerifyDetails(index=U32_MAX + 1, message=b"")

    def test_review_body_preserved(self):
        review = Review(id=3, rating=4, owner=acct(9), body=b"tasty")
        assert Review.from_dict(review.to_dict()) == review


class TestEncoding:

    def test_checked_add(self):
        assert checked_add_u32(1, 2) == 3
        assert checked_add_u32(U32_MAX - 1, 1) == U32_MAX
        with pytest.raises(ArithmeticOverflow):
            checked_add_u32(U32_MAX, 1)

    def test_u32_be(self):
        assert u32_be(1) == b"\x00\x00\x00\x01"
        assert u32_be(0x01020304) == b"\x01\x02\x03\x04"
        with pytest.raises(ArithmeticOverflow):
            u32_be(U32_MAX + 1)

    def test_canonical_json_sorted_compact(self):
        assert canonicalize({"b": 1, "a": [1, 2]}) == b'{"a":[1,2],"b":1}'
        assert decanonicalize(b'{"a":1}') == {"a": 1}
