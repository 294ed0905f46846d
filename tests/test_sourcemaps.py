#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Source map handling: reference detection, classification, repair and the
companion map produced by the script merger.
"""
from __future__ import annotations

import base64
import json
import sys
import unittest
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from tsmerge.core.context import MergeContext, MergeOptions  # noqa: E402
from tsmerge.core.models import File, SourceMapInfo  # noqa: E402
from tsmerge.processing.js_processor import JsProcessor  # noqa: E402
from tsmerge.processing.sourcemaps import (  # noqa: E402
    INLINE_PREFIX,
    classify_source_map,
    decode_data_uri,
    find_source_map_comment,
    load_source_map,
    repair_source_map,
    source_map_comment,
    strip_source_map_comments,
)

ASSETS = Path(__file__).resolve().parent / "assets"
MODULES_JS = (ASSETS / "modules_raw.js").read_text(encoding="utf-8")
SINGLE_JS = (ASSETS / "single_raw.js").read_text(encoding="utf-8")

ORIGINAL_MAP = {
    "version": 3,
    "file": "modules.js",
    "sourceRoot": "../src",
    "sources": ["om/core.ts", "om/data.ts"],
    "names": ["om", "data"],
    "mappings": "AAAA,IAAU,EAAE",
}


def _data_uri(payload: dict) -> str:
    return INLINE_PREFIX + base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def _with_inline_map(text: str, payload: dict = ORIGINAL_MAP) -> str:
    return f"{text}//# sourceMappingURL={_data_uri(payload)}\n"


def _processor(text: str, name: str = "modules.js", map_loader=None, **options) -> JsProcessor:
    context = MergeContext(MergeOptions(logger="none", **options))
    return JsProcessor(File(contents=text, name=name, path="build"), context, map_loader=map_loader)


# --------------------------------------------------------------------------- #
#  1. Reference comments                                                      #
# --------------------------------------------------------------------------- #
class CommentTests(unittest.TestCase):
    def test_line_comment(self) -> None:
        self.assertEqual(find_source_map_comment("x;\n//# sourceMappingURL=app.js.map\n"), "app.js.map")

    def test_legacy_and_block_comments(self) -> None:
        self.assertEqual(find_source_map_comment("x;\n//@ sourceMappingURL=a.map"), "a.map")
        self.assertEqual(find_source_map_comment("x;\n/*# sourceMappingURL=b.map */\n"), "b.map")

    def test_last_comment_wins(self) -> None:
        text = "//# sourceMappingURL=first.map\nx;\n//# sourceMappingURL=second.map\n"
        self.assertEqual(find_source_map_comment(text), "second.map")

    def test_inline_mention_is_not_a_reference(self) -> None:
        self.assertIsNone(find_source_map_comment('var s = "//# sourceMappingURL=x.map";\n'))

    def test_strip_removes_every_reference(self) -> None:
        text = "a;\n//# sourceMappingURL=one.map\nb;\n    /*# sourceMappingURL=two.map */\n"
        self.assertEqual(strip_source_map_comments(text), "a;\nb;\n")


# --------------------------------------------------------------------------- #
#  2. Classification                                                          #
# --------------------------------------------------------------------------- #
class ClassifyTests(unittest.TestCase):
    def test_none(self) -> None:
        self.assertEqual(classify_source_map("var x;\n"), SourceMapInfo())

    def test_url(self) -> None:
        info = classify_source_map("var x;\n//# sourceMappingURL=x.js.map\n")
        self.assertEqual(info.kind, "url")
        self.assertEqual(info.url, "x.js.map")
        self.assertIsNone(info.data)

    def test_inline(self) -> None:
        info = classify_source_map(_with_inline_map("var x;\n"))
        self.assertEqual(info.kind, "inline")
        self.assertEqual(info.data, ORIGINAL_MAP)

    def test_inline_without_charset(self) -> None:
        uri = "data:application/json;base64," + base64.b64encode(b'{"version": 3}').decode("ascii")
        self.assertEqual(decode_data_uri(uri), {"version": 3})

    def test_broken_data_uri_degrades_to_none(self) -> None:
        info = classify_source_map("var x;\n//# sourceMappingURL=data:application/json;base64,!!!\n")
        self.assertEqual(info.kind, "none")
        self.assertTrue(info.url.startswith("data:"))

    def test_unsupported_data_uri(self) -> None:
        with self.assertRaises(ValueError):
            decode_data_uri("data:text/plain;base64,AAAA")

    def test_load_uses_the_loader_for_urls(self) -> None:
        calls = []

        def loader(file, url):
            calls.append((file.name, url))
            return json.dumps(ORIGINAL_MAP)

        info = SourceMapInfo(kind="url", url="x.js.map")
        data = load_source_map(info, File(contents="", name="x.js"), loader)
        self.assertEqual(data, ORIGINAL_MAP)
        self.assertEqual(calls, [("x.js", "x.js.map")])

    def test_load_without_loader(self) -> None:
        info = SourceMapInfo(kind="url", url="x.js.map")
        self.assertIsNone(load_source_map(info, File(contents="", name="x.js")))

    def test_load_rejects_non_objects(self) -> None:
        info = SourceMapInfo(kind="url", url="x.js.map")
        with self.assertRaises(ValueError):
            load_source_map(info, File(contents="", name="x.js"), lambda f, u: "[1, 2]")


# --------------------------------------------------------------------------- #
#  3. Repair                                                                  #
# --------------------------------------------------------------------------- #
class RepairTests(unittest.TestCase):
    FRESH = {"version": 3, "sources": ["?"], "names": ["tmp"], "mappings": "AACA"}

    def test_metadata_comes_from_the_original(self) -> None:
        result = repair_source_map(self.FRESH, ORIGINAL_MAP, 2, file_name="m.merged.js", source_name="m.js")
        self.assertEqual(result["mappings"], "AACA")
        self.assertEqual(result["sources"], ORIGINAL_MAP["sources"])
        self.assertEqual(result["names"], ORIGINAL_MAP["names"])
        self.assertEqual(result["sourceRoot"], "../src")
        self.assertEqual(result["file"], "modules.js")
        self.assertNotIn("sourcesContent", result)

    def test_zero_merges_keep_original_mappings(self) -> None:
        result = repair_source_map(self.FRESH, ORIGINAL_MAP, 0, file_name="m.merged.js", source_name="m.js")
        self.assertEqual(result["mappings"], ORIGINAL_MAP["mappings"])

    def test_missing_fields_get_placeholders(self) -> None:
        result = repair_source_map({"mappings": "AAAA"}, {}, 1, file_name="m.merged.js", source_name="m.js")
        self.assertEqual(result["file"], "m.merged.js")
        self.assertEqual(result["sources"], ["m.js"])
        self.assertEqual(result["names"], [""])
        self.assertEqual(result["sourceRoot"], "")
        self.assertEqual(result["version"], 3)
        self.assertNotIn("sourcesContent", result)

    def test_sources_content_is_carried(self) -> None:
        original = dict(ORIGINAL_MAP, sourcesContent=["namespace om {}", "namespace om.data {}"])
        result = repair_source_map(self.FRESH, original, 1, file_name="m.merged.js", source_name="m.js")
        self.assertEqual(result["sourcesContent"], original["sourcesContent"])

    def test_reference_comments(self) -> None:
        self.assertEqual(source_map_comment("url", {}, "m.js.map"), "//# sourceMappingURL=m.js.map\n")
        self.assertEqual(source_map_comment("none", {}, "m.js.map"), "")
        inline = source_map_comment("inline", {"version": 3}, "m.js.map")
        self.assertTrue(inline.startswith("//# sourceMappingURL=" + INLINE_PREFIX))
        self.assertEqual(decode_data_uri(inline.strip().split("=", 1)[1]), {"version": 3})


# --------------------------------------------------------------------------- #
#  4. Script merger integration                                               #
# --------------------------------------------------------------------------- #
class ScriptMapTests(unittest.TestCase):
    def test_inline_map_without_merges(self) -> None:
        processor = _processor(_with_inline_map(SINGLE_JS), name="single.js")
        result = processor.merge()

        self.assertEqual(processor.merge_count, 0)
        self.assertEqual(result.contents.count("sourceMappingURL="), 1)
        info = classify_source_map(result.contents)
        self.assertEqual(info.kind, "inline")
        self.assertEqual(info.data["mappings"], ORIGINAL_MAP["mappings"])
        self.assertEqual(info.data["sources"], ORIGINAL_MAP["sources"])

    def test_inline_map_with_merges(self) -> None:
        processor = _processor(_with_inline_map(MODULES_JS))
        result = processor.merge()

        info = classify_source_map(result.contents)
        self.assertEqual(info.kind, "inline")
        self.assertNotEqual(info.data["mappings"], ORIGINAL_MAP["mappings"])
        self.assertEqual(info.data["sources"], ORIGINAL_MAP["sources"])
        self.assertEqual(info.data["names"], ORIGINAL_MAP["names"])
        self.assertEqual(info.data["sourceRoot"], ORIGINAL_MAP["sourceRoot"])

        companion = processor.source_map_file
        self.assertEqual(companion.name, "modules.merged.js.map")
        self.assertEqual(companion.path, "build")
        self.assertEqual(json.loads(companion.contents), info.data)

    def test_url_map_is_loaded_and_referenced(self) -> None:
        text = MODULES_JS + "//# sourceMappingURL=modules.js.map\n"
        processor = _processor(text, map_loader=lambda file, url: json.dumps(ORIGINAL_MAP))
        result = processor.merge()

        self.assertTrue(result.contents.endswith("//# sourceMappingURL=modules.merged.js.map\n"))
        self.assertEqual(result.contents.count("sourceMappingURL="), 1)
        companion = json.loads(processor.source_map_file.contents)
        self.assertEqual(companion["sources"], ORIGINAL_MAP["sources"])

    def test_url_map_that_cannot_be_found(self) -> None:
        text = MODULES_JS + "//# sourceMappingURL=modules.js.map\n"
        processor = _processor(text, map_loader=lambda file, url: None)
        result = processor.merge()
        self.assertIsNone(processor.source_map_file)
        self.assertNotIn("sourceMappingURL", result.contents)

    def test_skip_source_maps(self) -> None:
        processor = _processor(_with_inline_map(MODULES_JS), skip_source_maps=True)
        result = processor.merge()
        self.assertIsNone(processor.source_map_file)
        self.assertNotIn("sourceMappingURL", result.contents)


if __name__ == "__main__":
    unittest.main()
