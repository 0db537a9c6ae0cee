"""Tests for editable model -> persisted config mangling and the round-trip law."""

from __future__ import annotations

from typing import Any

from kllconf.domain.keys import KeyTable
from kllconf.domain.models import Animation, Define, EditableConfig, Key, Macro
from kllconf.transform import mangle, merge_config, normalize


class TestMangle:
    def test_absent_fields_are_omitted(self) -> None:
        assert mangle(EditableConfig()) == {}
        assert mangle(EditableConfig(header={"A": "1"})) == {"header": {"A": "1"}}

    def test_ids_are_not_written(self) -> None:
        out = mangle(EditableConfig(defines=[Define(id="x", name="N", value="V")]))
        assert out["defines"] == [{"name": "N", "value": "V"}]

    def test_animation_frames_split(self) -> None:
        out = mangle(EditableConfig(animations={"a": Animation(settings="s", frames="f1\nf2")}))
        assert out["animations"] == {"a": {"settings": "s", "frames": ["f1", "f2"]}}

    def test_empty_frames(self) -> None:
        out = mangle(EditableConfig(animations={"a": Animation()}))
        assert out["animations"]["a"]["frames"] == []

    def test_macro_tokens_become_codes(self) -> None:
        macro = Macro(id="m", name="M", trigger=[[Key(code="A"), Key(code="B")]])
        out = mangle(EditableConfig(macros={"0": [macro]}))
        assert out["macros"] == {"0": [{"name": "M", "trigger": [["A", "B"]], "output": [[]]}]}

    def test_placeholder_writes_code_and_label(self) -> None:
        raw = {"matrix": [{"layers": {"0": {"key": "HYPER", "label": "Hyp"}}}]}
        out = mangle(normalize(raw, {}))
        assert out["matrix"] == [{"layers": {"0": {"key": "HYPER", "label": "Hyp"}}}]


class TestMergeConfig:
    def test_mangled_fields_win(self) -> None:
        assert merge_config({"header": {"old": "1"}, "keep": 1}, {"header": {}}) == {
            "header": {},
            "keep": 1,
        }

    def test_none_raw(self) -> None:
        assert merge_config(None, {"custom": {}}) == {"custom": {}}


class TestRoundTrip:
    def test_unedited_config_reproduces_raw(
        self, raw_config: dict[str, Any], key_table: KeyTable
    ) -> None:
        result = merge_config(raw_config, mangle(normalize(raw_config, key_table)))
        assert result == raw_config

    def test_idempotent(self, raw_config: dict[str, Any], key_table: KeyTable) -> None:
        once = normalize(raw_config, key_table)
        merged = merge_config(raw_config, mangle(once))
        assert normalize(merged, key_table) == once

    def test_idempotent_without_table(self, raw_config: dict[str, Any]) -> None:
        once = normalize(raw_config, None)
        assert normalize(merge_config(raw_config, mangle(once)), None) == once

    def test_extra_fields_survive(self, key_table: KeyTable) -> None:
        raw = {
            "matrix": [{"id": 7, "code": "0x01", "layers": {"0": {"key": "ESC", "label": "Esc"}}}],
            "defines": [{"name": "N", "value": "1", "comment": "keep"}],
            "animations": {
                "empty": {"settings": "", "frames": [""]},
                "text": {"settings": "s", "frames": "A[0]\nA[1]"},
            },
            "macros": {
                "0": [{"name": "M", "trigger": [["A"]], "output": [["B"]], "enabled": False}]
            },
        }
        assert merge_config(raw, mangle(normalize(raw, key_table))) == raw

    def test_edited_text_frames_stay_text(self) -> None:
        raw = {"animations": {"a": {"settings": "s", "frames": "A[0]"}}}
        animation = normalize(raw, {}).animations["a"]
        edited = animation.model_copy(update={"frames": "A[1]\nA[2]"})
        out = mangle(EditableConfig(animations={"a": edited}))
        assert out["animations"]["a"]["frames"] == "A[1]\nA[2]"

    def test_edited_list_frames_are_split(self) -> None:
        raw = {"animations": {"a": {"settings": "s", "frames": [""]}}}
        animation = normalize(raw, {}).animations["a"]
        edited = animation.model_copy(update={"frames": "A[1]\nA[2]"})
        out = mangle(EditableConfig(animations={"a": edited}))
        assert out["animations"]["a"]["frames"] == ["A[1]", "A[2]"]

    def test_partial_config_stabilizes(self) -> None:
        raw = {"header": {"Name": "X"}, "macros": {"0": [{"name": "M"}]}}
        once = normalize(raw, {})
        merged = merge_config(raw, mangle(once))
        assert normalize(merged, {}) == once
