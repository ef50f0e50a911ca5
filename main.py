import sys

from rich.pretty import pprint

from adorn import *
from adorn.extensions import *
from adorn.logs import install


def fetch(parsed):
    pprint(parsed)


tool = Command(
    "fetch",
    "fetch records from the api",
    flags=[
        Flag("api-key", "key used to sign requests", env="API_KEY"),
        Flag("level", "log verbosity", short="l"),
        Flag("debug", "print the reconciled arguments", short="d", switch=True),
    ],
    version="0.0.0",
    run=fetch,
    shell=True,
    colorful=True,
)

extensions = [
    author("Eiko Reishin"),
    long_description("""
        Records are fetched page by page and printed as they arrive.
    """),
    default_values({"level": "info"}),
    env_vars(),
    require(["api-key"]),
    version_subcommand(),
    help_subcommand(),
]


def parse(command, tokens, /):
    """
    Stand-in for a real parser: presence switches of `command` plus one subcommand.

    "-h"/"--help" style tokens become USER switches; the first other token is the
    route and the rest are operands ("help version" shows the version's help).
    Value-bearing flags are not parsed here; api-key and level come from the
    environment and the defaults.
    """
    aliases = {}
    for flag in command.flags:
        if flag.switch:
            aliases[flag.long] = flag
            if flag.short:
                aliases["-" + flag.short] = flag

    flags, words = [], []
    for token in tokens:
        if token in aliases:
            flags.append(ParsedFlag(aliases[token], True))
        else:
            words.append(token)
    return ParsedArguments(flags, words[1:], words[:1])


if __name__ == '__main__':
    install()
    sys.exit(invoke(tool, extensions, parse(tool, sys.argv[1:])))
