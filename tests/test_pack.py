from __future__ import annotations

import math

import pytest

from tablit import Table, pack
from tablit.pack import base


def roundtrip(v):
    text = pack.dump_text(v)
    v2 = pack.load_text(text)
    assert v2 == v
    assert pack.dump_text(v2) == text
    return text


@pytest.mark.parametrize(
    ("value", "text"),
    (
        (1, "1"),
        (-12, "-12"),
        (1.5, "1.5"),
        (0.1, "0.1"),
        (2**80, "1208925819614629174706176"),
        (math.inf, "1e999"),
        (-math.inf, "-1e999"),
        (math.nan, "(0/0)"),
        (True, "T"),
        (False, "F"),
        ("a", '"a"'),
        (None, "_"),
        (len, "(_)"),
        (object(), "_"),
    ),
)
def test_dump_leaves(value, text):
    assert pack.dump_text(value) == text


def test_dump_strings():
    assert pack.dump_text('a"b\\c\n\t\r') == r'"a\"b\\c\n\t\r"'
    # Control characters always use 3 digits
    assert pack.dump_text("\x001") == r'"\0001"'
    assert pack.dump_text("\x7f") == r'"\127"'
    assert pack.dump_text("été 🎉") == '"été 🎉"'


def test_dump_containers():
    assert pack.dump_text([]) == "{}"
    assert pack.dump_text({}) == "{}"
    assert pack.dump_text(Table()) == "{}"
    assert pack.dump_text([1, 2, 3]) == "{1,2,3}"
    assert pack.dump_text((1, "a")) == '{1,"a"}'
    assert pack.dump_text([1, None, 3]) == "{1,_,3}"
    assert pack.dump_text([1, None]) == "{1}"
    assert pack.dump_text([[], [[]]]) == "{{},{{}}}"
    t = Table.array("a", "b")
    t["x"] = 1
    assert pack.dump_text(t) == '{"a","b",x=1}'


def test_dump_keys():
    assert pack.dump_text({"valid_name": 1}) == "{valid_name=1}"
    assert pack.dump_text({"2lines": 1}) == '{["2lines"]=1}'
    assert pack.dump_text({"end": 1}) == '{["end"]=1}'
    assert pack.dump_text({"T": 1}) == "{T=1}"
    assert pack.dump_text({"": 1}) == '{[""]=1}'
    assert pack.dump_text({"ключ": 1}) == '{["ключ"]=1}'
    assert pack.dump_text(Table({True: 1, False: 2})) == "{[T]=1,[F]=2}"
    assert (
        pack.dump_text({0: "a", -1: "b", 1.5: "c"})
        == '{[0]="a",[-1]="b",[1.5]="c"}'
    )
    k = Table.array(1)
    t = Table()
    t[k] = "v"
    assert pack.dump_text(t) == '{[{1}]="v"}'


def test_dump_skips_values():
    assert pack.dump_text({"a": object(), "b": 1}) == "{b=1}"
    assert pack.dump_text({"a": None, "b": 1}) == "{b=1}"
    assert pack.dump_text({"f": print}) == "{f=(_)}"
    assert pack.dump_text({frozenset(): 1, None: 2, "c": 3}) == "{c=3}"
    assert pack.dump_text({math.nan: 1, "c": 3}) == "{c=3}"


def test_split_point_in_output():
    v = Table.array(1, 2, 3, None, None, None, None, None, None, None, 100)
    assert pack.dump_text(v) == "{1,2,3,[11]=100}"
    assert pack.dump_text([1, 2, 3, *[None] * 7, 100]) == "{1,2,3,[11]=100}"
    # Holes are worth it when they are followed by enough values
    assert pack.dump_text([1, None, 3]) == "{1,_,3}"
    assert (
        pack.dump_text({2: "b", 1: "a", 1000: "z"}) == '{"a","b",[1000]="z"}'
    )


@pytest.mark.parametrize(
    ("present", "split"),
    (
        (set(), 0),
        ({1, 2, 3, 11}, 3),
        ({5}, 0),
        ({2}, 2),
        ({2, 3}, 3),
        (range(1, 1001), 1000),
        (set(range(1, 10)) | set(range(11, 30)), 29),
        ({1, 10**9}, 1),
        # Nothing in 10..99 pays for its holes, the scan stops at 100
        ({*range(1, 10), *range(100, 201)}, 9),
        ({1, 2, 1000}, 2),
        # No split in 1..9 at all
        (set(range(10, 40)), 0),
    ),
)
def test_split_point(present, split):
    assert base.split_point(present) == split


def test_shared():
    shared = Table.array(1)
    v = Table({"a": shared, "b": shared})
    assert pack.dump_text(v) == "{a={1}}"
    decoded = pack.load_text(pack.dump_text(v))
    assert decoded == Table({"a": Table.array(1)})
    assert "b" not in decoded

    # Positional entries become holes
    assert pack.dump_text([shared, shared]) == "{{1},_}"


def test_shared_key():
    k = Table.array(1)
    t = Table({"a": k})
    t[k] = 2
    assert pack.dump_text(t) == "{a={1}}"


def test_recursive():
    t = Table()
    t["self"] = t
    t["x"] = 1
    assert pack.dump_text(t) == "{x=1}"
    lst: list = []
    lst.append(lst)
    assert pack.dump_text(lst) == "{_}"


def test_deep_nesting():
    depth = 10_000
    v: list = []
    for _ in range(depth):
        v = [v]
    text = pack.dump_text(v)
    assert text == "{" * depth + "{}" + "}" * depth
    decoded = pack.load_text(text)
    for _ in range(depth):
        assert len(decoded) == 1
        decoded = decoded[1]
    assert decoded == Table()


@pytest.mark.parametrize(
    "value",
    (
        Table.array(1, "two", 3.5, True, False),
        Table({"a": Table.array(1, 2), "b": Table({"c": Table()})}),
        Table.array(1, None, 3),
        # False == 0 so we cannot use a dict literal here
        Table(
            [
                (0, "zero"),
                (-1, "neg"),
                (2.5, "f"),
                (True, "t"),
                (False, "f"),
                ("", "empty"),
                ("end", 1),
            ]
        ),
        Table.array(*range(1, 200)),
        Table({1000: 1, 1: 2}),
        Table({"ключ": "значение 🎉"}),
        Table({"ctrl": "\x00\x01\x1f\x7f\n\r\t"}),
        Table.array(2**100, -0.0, 1e-300, math.inf, -math.inf),
    ),
)
def test_roundtrip(value):
    roundtrip(value)


def test_roundtrip_plain():
    v = {"a": [1, 2, None, 4], "b": {"c": "d"}, 3: False}
    assert pack.load_text(pack.dump_text(v)) == Table(
        {
            "a": Table.array(1, 2, None, 4),
            "b": Table({"c": "d"}),
            3: False,
        }
    )


def test_roundtrip_big_int():
    big = 10**5000
    roundtrip(Table.array(big, -big))
    roundtrip(Table({big: "k"}))
    [x] = pack.load_text("{" + "1" * 5000 + "}").values()
    assert x == (big - 1) // 9


def test_roundtrip_nan():
    [x] = pack.load_text(pack.dump_text([math.nan])).values()
    assert math.isnan(x)


def test_load_table_keys():
    t = pack.load_text('{[{1}]="v"}')
    [k] = t.keys()
    assert isinstance(k, Table)
    assert k == Table.array(1)
    assert t[k] == "v"


@pytest.mark.parametrize(
    ("text", "value"),
    (
        ("T", True),
        ("F", False),
        ("_", None),
        ("(_)", None),
        ("((1))", 1),
        ("-5", -5),
        ("- -5", 5),
        ("0x1F", 31),
        (".5", 0.5),
        ("5.", 5.0),
        ("1e3", 1000.0),
        ("1e999", math.inf),
        ("-1e999", -math.inf),
        ('"a"', "a"),
        ("'it\\'s'", "it's"),
        (r'"a\"b\\c\n\t\001"', 'a"b\\c\n\t\x01'),
        (r'"\65\x41\u{48}"', "AAH"),
        ('"a\\z  \n  b"', "ab"),
        ('"a\\\nb"', "a\nb"),
        ("{}", Table()),
        ("{1,2,3}", Table.array(1, 2, 3)),
        ("{1;2,}", Table.array(1, 2)),
        ("{1,_,3}", Table({1: 1, 3: 3})),
        ("{ 1, -- one\n 2 }", Table.array(1, 2)),
        ("{x=_,y=1}", Table({"y": 1})),
        (
            '{a=1,["b c"]=2,[T]=3,[F]=4,[1.5]=5,[-1]=6}',
            Table({"a": 1, "b c": 2, True: 3, False: 4, 1.5: 5, -1: 6}),
        ),
        ("{T=1,F=2,_=3}", Table({"T": 1, "F": 2, "_": 3})),
        ("{[2]=1,[2.0]=2}", Table({2: 2})),
    ),
)
def test_load(text, value):
    assert pack.load_text(text) == value


def test_load_nan():
    assert math.isnan(pack.load_text("(0/0)"))
    assert math.isnan(pack.load_text("-(0/0)"))


@pytest.mark.parametrize(
    "text",
    (
        "",
        "   ",
        "os",
        "true",
        "nil",
        "{x}",
        "{1,2,print}",
        "f()",
        "{x=os.exit()}",
        "{1,2",
        "{1 2}",
        "1 2",
        '"abc',
        '"a\nb"',
        r'"\q"',
        r'"\256"',
        "{[_]=1}",
        "{[(0/0)]=1}",
        "-T",
        '-"5"',
        "-{}",
        "{end=1}",
        "{[1]}",
        "(1",
        "(1/0)",
        "@",
    ),
)
def test_load_invalid(text):
    assert pack.load_text(text) is None
    with pytest.raises(pack.DecodeError):
        pack.parse_text(text)


def test_decode_error():
    with pytest.raises(pack.DecodeError, match="Unbound variable 'x'") as e:
        pack.parse_text("{1,x}")
    assert (e.value.pos, e.value.lineno, e.value.colno) == (3, 1, 4)

    with pytest.raises(pack.DecodeError, match="line 2 column 3") as e:
        pack.parse_text("{\n  y}")
    assert e.value.pos == 4

    with pytest.raises(pack.DecodeError, match="table index is nil"):
        pack.parse_text("{[_]=1}")

    with pytest.raises(pack.DecodeError, match="near end of input"):
        pack.parse_text("{1,")


def test_parse_text_type():
    with pytest.raises(TypeError):
        pack.parse_text(b"{}")
    assert pack.load_text(b"{}") is None
    assert pack.load_text(None) is None
