#!/usr/bin/env python3

#-------------------------------------------------------------------#
# Copyright (C) 2019-2023 by Serguei Tarassov <serge@arbinada.com>  #
# Distributed freely under the MIT License                          #
#-------------------------------------------------------------------#

"""
JSON SAX parsing examples
Captor temperature stream

Input stream example:

[
    {
        "timestamp": "2023-01-02 01:02:34",
        "captor_id": "42326a90-6aae-11ee-a361-4339b9d98b6a",
        "temperature": 36.6
    },
    ...
]

Members other than the temperature are skipped without building values,
and each reading is checkpointed into a compact binary log.
"""

import io
import sys
import os
sys.path.append(os.path.realpath(os.path.join(os.path.dirname(__file__), "../..")))
from stream_codec.compact_size import CompactSize
from stream_codec.json_sax import expect_json_array, expect_json_object_ascii, expect_json
from stream_codec.parse_context import ParseContext
from stream_codec.store import StoreWriter, StoreReader


class CaptorDataHandler:
    def __init__(self, log: StoreWriter) -> None:
        self._log = log
        self._count = 0
        self._sum = 0.0
        self._data = {}

    def on_reading(self, index: int, context: ParseContext):
        self._data = {}
        expect_json_object_ascii(context, self.on_member)
        temperature = self._data.get("temperature")
        if not isinstance(temperature, (int, float)):
            print(f"Skip reading {index} without temperature at position {str(context.pos)}")
            return
        self._count += 1
        self._sum += temperature
        # Store tenths of a degree above absolute zero
        self._log.write_string(self._data.get("captor_id", ""))
        CompactSize(round((temperature + 273.15) * 10)).serialize(self._log)
        print(".", end = "")

    def on_member(self, key: str, context: ParseContext):
        if key in ("captor_id", "temperature"):
            self._data[key] = expect_json(context)
        else:
            expect_json(context)

    def report(self):
        print("\nProcessing finished")
        print(f"Timeseries length: {self._count}")
        if self._count:
            print(f"Average temperature is: {self._sum / self._count}")


def run():
    log = StoreWriter()
    handler = CaptorDataHandler(log)
    data_filename = os.path.realpath(os.path.join(os.path.dirname(__file__), "captor_data.json"))
    with io.open(data_filename, "rb") as source:
        print("Start processing")
        context = ParseContext(source, data_filename)
        expect_json_array(context, handler.on_reading)
    handler.report()
    if log.offset:
        reader = StoreReader(log.getvalue())
        print(f"Binary log: {log.offset} bytes, first captor {reader.read_string()!r} "
              f"at {(reader.read_compact_size() / 10) - 273.15:.1f}")


if __name__ == "__main__":
    run()
