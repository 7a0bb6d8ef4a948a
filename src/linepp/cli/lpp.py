"""
lpp - Preprocessor Command-Line Interface
=========================================

This module implements the command-line interface for the line
preprocessor. It reads a file (or stdin), processes comments, statements
and variable references, and writes the result to a file (or stdout).

Usage Examples
--------------
Basic preprocessing to stdout:
    $ lpp config.yaml.in

Define variables and write a file:
    $ lpp -D env=prod -D replicas=3 config.yaml.in -o config.yaml

YAML-friendly markers (@if ... / # comments):
    $ lpp --yaml deploy.yaml.in

Resolve $<secret:...> and $<profile:...> references:
    $ lpp --profile-file profile.json settings.in

Exit Codes
----------
0 - Success
1 - Preprocessing error (malformed statement, undefined variable, ...)
2 - Invalid arguments or missing files
3 - Internal error
"""

import logging
from typing import Optional

import click

from linepp import __version__
from linepp.cli.errors import handle_cli_exception
from linepp.options import LineEnding, PreprocessOptions, validate_statement_marker
from linepp.profile import DictProfileClient
from linepp.reader import PreprocessReader
from linepp.variables import BUILTIN_SYNTAXES, is_valid_name

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def parse_definitions(ctx, param, values: tuple[str, ...]) -> dict[str, str]:
    """
    Parse repeated -D NAME[=VALUE] options into a dict.

    Raises:
        click.BadParameter: For invalid variable names
    """
    variables = {}
    for item in values:
        name, _, value = item.partition("=")
        name = name.strip()
        if not is_valid_name(name):
            raise click.BadParameter(
                f"invalid variable name '{name}' in '{item}'",
                ctx=ctx,
                param=param,
            )
        variables[name] = value
    return variables


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.File("r", encoding="utf-8"),
)
@click.option(
    "-o", "--output",
    type=click.File("wb"),
    default="-",
    help="Output file (default: stdout)",
)
@click.option(
    "-D", "--define",
    "variables",
    multiple=True,
    callback=parse_definitions,
    metavar="NAME[=VALUE]",
    help="Define a variable (can be repeated)",
)
@click.option(
    "--syntax",
    type=click.Choice(sorted(BUILTIN_SYNTAXES), case_sensitive=False),
    default="angle",
    help="Variable reference syntax: angle $<x>, curly ${x}, paren $(x)",
)
@click.option(
    "--yaml",
    "yaml_mode",
    is_flag=True,
    help="Use '@' for statements and '#' for comments",
)
@click.option(
    "--statement-marker",
    default=None,
    help="Statement marker character (default: '#')",
)
@click.option(
    "--comment-marker",
    "comment_markers",
    multiple=True,
    help="Comment marker, replaces the defaults (can be repeated)",
)
@click.option(
    "--keep-comments",
    is_flag=True,
    help="Pass comment lines through unchanged",
)
@click.option(
    "--remove-comments",
    is_flag=True,
    help="Drop comment lines instead of blanking them",
)
@click.option(
    "--remove-blank",
    is_flag=True,
    help="Drop blank and whitespace-only lines",
)
@click.option(
    "--no-statements",
    is_flag=True,
    help="Pass statement lines through without processing them",
)
@click.option(
    "--no-expand",
    is_flag=True,
    help="Do not expand variables in text lines",
)
@click.option(
    "--tab-stop",
    type=click.IntRange(min=0),
    default=0,
    help="Expand TABs to this width (default: 0, disabled)",
)
@click.option(
    "--indent",
    type=click.IntRange(min=0),
    default=0,
    help="Indent non-blank lines by this many spaces",
)
@click.option(
    "--default-variable",
    default=None,
    help="Value used for undefined variables instead of failing",
)
@click.option(
    "--default-env",
    default=None,
    help="Value used for undefined environment variables instead of failing",
)
@click.option(
    "--line-ending",
    type=click.Choice([e.value for e in LineEnding], case_sensitive=False),
    default=LineEnding.PLATFORM.value,
    help="Line ending written after each line (default: platform)",
)
@click.option(
    "--profile-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON file with secrets and profile values",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging to stderr)",
)
@click.version_option(version=__version__, prog_name="lpp")
def main(
    input_file,
    output,
    variables: dict[str, str],
    syntax: str,
    yaml_mode: bool,
    statement_marker: Optional[str],
    comment_markers: tuple[str, ...],
    keep_comments: bool,
    remove_comments: bool,
    remove_blank: bool,
    no_statements: bool,
    no_expand: bool,
    tab_stop: int,
    indent: int,
    default_variable: Optional[str],
    default_env: Optional[str],
    line_ending: str,
    profile_file: Optional[str],
    verbose: bool,
) -> None:
    """
    Preprocess a text file.

    INPUT_FILE is the file to process ('-' for stdin).

    \b
    Statements:
        #define NAME[=VALUE]
        #if A==B | A!=B | defined(NAME) | undefined(NAME)
        #else / #endif
        #switch VALUE / #case VALUE / #default / #endswitch

    \b
    Variable references:
        $<name>  $<env:NAME>  $<profile:NAME>  $<secret:NAME[PROPERTY]:SOURCE>
    """
    setup_logging(verbose)

    try:
        options = PreprocessOptions(
            variable_syntax=syntax,
            expand_variables=not no_expand,
            strip_comments=not keep_comments,
            remove_comments=remove_comments,
            remove_blank=remove_blank,
            process_statements=not no_statements,
            tab_stop=tab_stop,
            indent=indent,
            default_variable=default_variable,
            default_environment_variable=default_env,
            line_ending=line_ending,
        )

        if yaml_mode:
            options.yaml_mode()
        if statement_marker is not None:
            options.statement_marker = validate_statement_marker(statement_marker)
        if comment_markers:
            options.clear_comment_markers()
            for marker in comment_markers:
                options.add_comment_marker(marker)

        profile_client = DictProfileClient.from_file(profile_file) if profile_file else None

        logger.debug(
            f"Preprocessing {input_file.name}: statement marker '{options.statement_marker}', "
            f"comment markers {options.comment_markers}, syntax {options.variable_syntax.name}"
        )

        reader = PreprocessReader(
            input_file,
            variables,
            options=options,
            profile_client=profile_client,
            filename=input_file.name,
        )

        # Output is binary; line endings are written as-is
        terminator = options.line_ending.terminator
        count = 0
        for line in reader:
            output.write((line + terminator).encode("utf-8"))
            count += 1

        logger.debug(f"Wrote {count} lines from {reader.line_number} input lines")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
