"""Tests for single-key, batch, expiry, list and script operations."""

import datetime

import pytest
import redis
from pytest_mock import MockerFixture

from layercache_redis.client import STATUS_OK, KeyValueClient
from layercache_redis.exceptions import ClientOperationError, SerializationError
from layercache_redis.serializers.json import JSONSerializer
from layercache_redis.serializers.msgpack import MessagePackSerializer
from layercache_redis.serializers.pickle import PickleSerializer
from layercache_redis.serializers.string import StringSerializer
from layercache_redis.types import TimeUnit
from tests.fixtures import make_fake_client


class TestGetSet:
    def test_set_then_get(self, client: KeyValueClient):
        value = {"name": "alice", "roles": ["admin"], "joined": datetime.date(2024, 1, 1)}
        assert client.set("user:1", value) == STATUS_OK
        assert client.get("user:1") == value

    def test_get_miss_is_none(self, client: KeyValueClient):
        assert client.get("missing") is None

    def test_get_with_result_type(self, client: KeyValueClient):
        client.set("count", 42)
        assert client.get("count", int) == 42
        with pytest.raises(SerializationError):
            client.get("count", str)

    def test_set_without_timeout_has_no_ttl(self, client: KeyValueClient):
        client.set("forever", "value")
        assert client.ttl("forever") == -1

    def test_values_are_stored_with_value_serializer(self, client: KeyValueClient):
        client.set("raw", "text")
        raw = client.get_client().get(b"raw")
        assert PickleSerializer().deserialize(raw) == "text"

    def test_unicode_keys(self, client: KeyValueClient):
        client.set("ключ", "данные")
        assert client.get("ключ") == "данные"


class TestSetWithTimeout:
    def test_ttl_within_bounds(self, client: KeyValueClient):
        assert client.set("session", "token", 5, TimeUnit.SECONDS) == STATUS_OK
        ttl = client.ttl("session")
        assert 0 < ttl <= 5
        assert client.get("session") == "token"

    def test_unit_conversion(self, client: KeyValueClient):
        client.set("minutes", "v", 2, TimeUnit.MINUTES)
        assert 60 < client.ttl("minutes") <= 120

    def test_sub_second_units_truncate(self, client: KeyValueClient):
        client.set("millis", "v", 3999, TimeUnit.MILLISECONDS)
        assert 0 < client.ttl("millis") <= 3

    def test_timedelta_timeout(self, client: KeyValueClient):
        client.set("delta", "v", datetime.timedelta(seconds=30))
        assert 0 < client.ttl("delta") <= 30

    def test_timeout_is_sent_with_set(self, client: KeyValueClient, mocker: MockerFixture):
        spy = mocker.spy(client.get_client(), "set")
        client.set("k", "v", 2, TimeUnit.MINUTES)
        assert spy.call_args.kwargs["ex"] == 120

    def test_zero_second_timeout_is_rejected_by_store(self, client: KeyValueClient):
        with pytest.raises(ClientOperationError):
            client.set("too_short", "v", 500, TimeUnit.MILLISECONDS)


class TestSetIfAbsent:
    def test_second_call_does_not_overwrite(self, client: KeyValueClient):
        assert client.set_if_absent("lock", "v1", 10) == STATUS_OK
        assert client.set_if_absent("lock", "v2", 10) is None
        assert client.get("lock") == "v1"

    def test_sets_ttl(self, client: KeyValueClient):
        client.set_if_absent("lock", "v1", 10)
        assert 0 < client.ttl("lock") <= 10

    def test_unit(self, client: KeyValueClient):
        client.set_if_absent("lock", "v1", 1, TimeUnit.HOURS)
        assert 3000 < client.ttl("lock") <= 3600


class TestDelete:
    def test_delete_returns_removed_count(self, client: KeyValueClient):
        client.set("a", 1)
        client.set("b", 2)
        assert client.delete("a", "b", "c") == 2
        assert client.get("a") is None

    def test_delete_many_accepts_sets(self, client: KeyValueClient):
        client.set("a", 1)
        client.set("b", 2)
        assert client.delete_many({"a", "b"}) == 2

    @pytest.mark.parametrize("keys", [None, [], set(), ()])
    def test_empty_input_makes_no_round_trip(self, client: KeyValueClient, mocker: MockerFixture, keys):
        spy = mocker.spy(client.get_client(), "delete")
        assert client.delete_many(keys) == 0
        spy.assert_not_called()

    def test_delete_many_with_single_string_key(self, client: KeyValueClient):
        client.set("a", 1)
        client.set("abc", 2)
        assert client.delete_many("abc") == 1
        assert client.get("abc") is None
        assert client.get("a") == 1

    def test_delete_without_keys(self, client: KeyValueClient, mocker: MockerFixture):
        spy = mocker.spy(client.get_client(), "delete")
        assert client.delete() == 0
        spy.assert_not_called()


class TestExistsAndExpire:
    def test_has_key(self, client: KeyValueClient):
        assert client.has_key("k") is False
        client.set("k", "v")
        assert client.has_key("k") is True

    def test_expire_existing_key(self, client: KeyValueClient):
        client.set("k", "v")
        assert client.expire("k", 20) is True
        assert 0 < client.ttl("k") <= 20
        assert client.get("k") == "v"

    def test_expire_with_unit(self, client: KeyValueClient):
        client.set("k", "v")
        client.expire("k", 90_000, TimeUnit.MILLISECONDS)
        assert 0 < client.ttl("k") <= 90

    def test_expire_missing_key(self, client: KeyValueClient):
        assert client.expire("missing", 20) is False

    def test_ttl_of_missing_key_passes_through(self, client: KeyValueClient):
        assert client.ttl("missing") == -2


class TestLists:
    def test_push_length_and_range(self, client: KeyValueClient):
        assert client.lpush("queue", "x", "y") == 2
        assert client.llen("queue") == 2
        assert client.lrange("queue", 0, -1) == ["y", "x"]

    def test_push_returns_new_length(self, client: KeyValueClient):
        client.lpush("queue", "a")
        assert client.lpush("queue", "b", "c") == 3

    def test_push_without_values_makes_no_round_trip(self, client: KeyValueClient, mocker: MockerFixture):
        spy = mocker.spy(client.get_client(), "lpush")
        assert client.lpush("queue") == 0
        spy.assert_not_called()

    def test_range_negative_indices(self, client: KeyValueClient):
        client.lpush("queue", "a", "b", "c", "d")
        assert client.lrange("queue", -2, -1) == ["b", "a"]
        assert client.lrange("queue", 1, 2) == ["c", "b"]

    def test_range_of_missing_list(self, client: KeyValueClient):
        assert client.lrange("missing", 0, -1) == []
        assert client.llen("missing") == 0

    def test_string_serializer_override(self, client: KeyValueClient):
        serializer = StringSerializer()
        client.lpush("plain", "x", "y", serializer=serializer)
        assert client.get_client().lrange(b"plain", 0, -1) == [b"y", b"x"]
        assert client.lrange("plain", 0, -1, serializer=serializer) == ["y", "x"]

    def test_range_rejects_non_string_elements(self, client: KeyValueClient):
        client.get_client().lpush(b"numbers", PickleSerializer().serialize(1))
        with pytest.raises(SerializationError):
            client.lrange("numbers", 0, -1)


class TestEval:
    def test_keys_and_args(self, client: KeyValueClient):
        script = "return redis.call('SET', KEYS[1], ARGV[1])"
        client.eval(script, ["scripted"], ["value"])
        assert client.get("scripted") == "value"

    def test_integer_result(self, client: KeyValueClient):
        assert client.eval("return #KEYS + #ARGV", ["a", "b"], ["c"]) == 3

    def test_no_keys_or_args(self, client: KeyValueClient):
        assert client.eval("return 42") == 42

    def test_args_use_serializer_override(self, client: KeyValueClient):
        script = "redis.call('SET', KEYS[1], ARGV[1]) return redis.call('GET', KEYS[1])"
        result = client.eval(script, ["k"], ["plain"], serializer=StringSerializer())
        assert result == b"plain"

    def test_script_error_is_wrapped(self, client: KeyValueClient):
        with pytest.raises(ClientOperationError):
            client.eval("return redis.call('NOSUCHCOMMAND')")


class TestSerializers:
    def test_per_call_override(self, client: KeyValueClient):
        serializer = JSONSerializer()
        client.set("json", {"a": 1}, serializer=serializer)
        assert client.get_client().get(b"json") == b'{"a": 1}'
        assert client.get("json", serializer=serializer) == {"a": 1}

    def test_override_with_ttl(self, client: KeyValueClient):
        serializer = MessagePackSerializer()
        client.set("mp", [1, 2], 10, serializer=serializer)
        assert client.get("mp", serializer=serializer) == [1, 2]

    def test_replace_default_value_serializer(self, client: KeyValueClient):
        client.value_serializer = JSONSerializer()
        client.set("json", [1, 2, 3])
        assert client.get_client().get(b"json") == b"[1, 2, 3]"
        assert client.get("json") == [1, 2, 3]

    def test_replace_default_with_dotted_path(self, client: KeyValueClient):
        client.value_serializer = "layercache_redis.serializers.msgpack.MessagePackSerializer"
        assert isinstance(client.value_serializer, MessagePackSerializer)

    def test_default_serializers(self, client: KeyValueClient):
        assert isinstance(client.key_serializer, StringSerializer)
        assert isinstance(client.value_serializer, PickleSerializer)

    def test_serializers_cannot_be_none(self, client: KeyValueClient):
        with pytest.raises(ValueError, match="key_serializer"):
            client.key_serializer = None
        with pytest.raises(ValueError, match="value_serializer"):
            client.value_serializer = None

    def test_constructor_serializers(self, fake_server):
        client = make_fake_client(fake_server, value_serializer=JSONSerializer)
        assert isinstance(client.value_serializer, JSONSerializer)

    def test_mismatched_serializer_raises_serialization_error(self, client: KeyValueClient):
        client.set("pickled", {"a": 1})
        with pytest.raises(SerializationError):
            client.get("pickled", serializer=JSONSerializer())


class TestFailurePolicy:
    def test_malformed_bytes_raise_serialization_error(self, client: KeyValueClient):
        client.get_client().set(b"corrupt", b"\x80\x04garbage")
        with pytest.raises(SerializationError):
            client.get("corrupt")

    def test_none_key_raises_serialization_error(self, client: KeyValueClient, mocker: MockerFixture):
        spy = mocker.spy(client.get_client(), "get")
        with pytest.raises(SerializationError):
            client.get(None)
        spy.assert_not_called()

    def test_unserializable_value(self, client: KeyValueClient):
        with pytest.raises(SerializationError):
            client.set("k", lambda: None)

    def test_connection_failure_is_wrapped(self, client: KeyValueClient, mocker: MockerFixture):
        error = redis.ConnectionError("Error 111 connecting to localhost:6379. Connection refused.")
        mocker.patch.object(client.get_client(), "get", side_effect=error)
        with pytest.raises(ClientOperationError) as exc_info:
            client.get("k")
        assert not isinstance(exc_info.value, SerializationError)
        assert exc_info.value.cause is error
        assert "Connection refused" in exc_info.value.message

    @pytest.mark.parametrize(
        ("method", "args"),
        [
            ("set", ("k", "v")),
            ("set_if_absent", ("k", "v", 10)),
            ("delete", ("k",)),
            ("has_key", ("k",)),
            ("expire", ("k", 10)),
            ("ttl", ("k",)),
            ("lpush", ("k", "v")),
            ("llen", ("k",)),
            ("lrange", ("k", 0, -1)),
            ("eval", ("return 1", ["k"], ["v"])),
            ("scan", ("k*",)),
        ],
    )
    def test_timeouts_are_wrapped(self, client: KeyValueClient, mocker: MockerFixture, method, args):
        raw = client.get_client()
        timeout = redis.TimeoutError("Timeout reading from socket")
        for command in ("set", "delete", "exists", "expire", "ttl", "lpush", "llen", "lrange", "eval", "scan"):
            mocker.patch.object(raw, command, side_effect=timeout)
        with pytest.raises(ClientOperationError) as exc_info:
            getattr(client, method)(*args)
        assert exc_info.value.cause is timeout

    def test_response_error_is_wrapped(self, client: KeyValueClient):
        client.lpush("list", "a")
        with pytest.raises(ClientOperationError, match="WRONGTYPE"):
            client.get("list")
