"""Stand-in for the yt-dlp CLI used by the process extractor tests.

Usage: fake_ytdlp.py SCENARIO.json [yt-dlp arguments...]

The scenario file holds ``flat`` and ``single`` lists of output lines, and
optional ``sleep_before``/``sleep_after`` (seconds to hang around printing), ``exit_code``
and ``stderr``. ``--playlist-items A-B`` slices the ``flat`` lines.
"""

import json
import sys
import time


def main(argv):
    with open(argv[1], encoding="utf-8") as handle:
        scenario = json.load(handle)
    args = argv[2:]

    with open(scenario["argv_log"], "a", encoding="utf-8") as log:
        log.write(json.dumps(args) + "\n")

    if "--no-playlist" in args:
        lines = scenario.get("single", [])
    else:
        lines = scenario.get("flat", [])
        if "--playlist-items" in args:
            start, end = args[args.index("--playlist-items") + 1].split("-")
            lines = lines[int(start) - 1:int(end)]

    if scenario.get("sleep_before"):
        time.sleep(scenario["sleep_before"])

    for line in lines:
        sys.stdout.write(line + "\n")
        sys.stdout.flush()

    if scenario.get("stderr"):
        sys.stderr.write(scenario["stderr"] + "\n")
        sys.stderr.flush()

    if scenario.get("sleep_after"):
        time.sleep(scenario["sleep_after"])

    return scenario.get("exit_code", 0)


if __name__ == "__main__":
    sys.exit(main(sys.argv))
