#!/usr/bin/env python3
"""
shortdown - Directive expansion for markdown articles

Expands {{< shortcode >}} directives in article sources and writes the
expanded articles, ready for the site's markdown engine.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Directives:
    {{< external-link "<url>" "<label>" >}}     anchor with external marker
    {{< table src="<path>" class="<class>" >}}  HTML table from a CSV file
    {{< subscribe >}}                           subscription block

Usage:
    shortdown inputdir/ outputdir/ [--inputFile article.md | --pattern '**/*.md']

    Each selected article is expanded and written to the same relative path
    under outputdir/. Table src paths resolve against --dataDir (default:
    inputdir/data). An article with any directive error is reported and not
    written; the run then exits with status 1.

Examples:
    # Expand every markdown article under content/
    shortdown content/ build/

    # One article, verbose, custom data directory and site config
    shortdown content/ build/ --inputFile posts/hello.md --dataDir tables/ \\
        --siteConfig shortdown.yaml -vv

    # Expand in parallel
    shortdown content/ build/ --jobs 8
"""

import sys
import contextvars
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import Expander, SiteConfig, SiteConfigError, directive_registry, __version__, LOG, state_connectToLogger
from .models import ExpansionError, ProgramState, pipeline


DISPLAY_TITLE = r"""
       _                _      _
   ___| |__   ___  _ __| |_ __| | _____      ___ __
  / __| '_ \ / _ \| '__| __/ _` |/ _ \ \ /\ / / '_ \
  \__ \ | | | (_) | |  | || (_| | (_) \ V  V /| | | |
  |___/_| |_|\___/|_|   \__\__,_|\___/ \_/\_/ |_| |_|

  Directive expansion for markdown articles
"""

# Define CLI arguments
parser = ArgumentParser(
    description="shortdown - expand {{< directive >}} shortcodes in markdown articles",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile",
    default="",
    type=str,
    help="Single article to expand (relative to inputdir); overrides --pattern",
)

parser.add_argument(
    "--pattern",
    default=appsettings.default_pattern,
    type=str,
    help="Glob (relative to inputdir) selecting articles to expand",
)

parser.add_argument(
    "--dataDir",
    default=None,
    type=str,
    help=f"Directory for table src paths. Defaults to inputdir/{appsettings.default_data_dir}",
)

parser.add_argument(
    "--siteConfig",
    default=None,
    type=str,
    help="Site configuration YAML (subscribe block, link/table classes)",
)

parser.add_argument(
    "--jobs",
    default=1,
    type=int,
    help="Number of articles expanded in parallel",
)

parser.add_argument(
    "--listDirectives",
    action="store_true",
    help="List available directives and exit",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def path_resolveAgainst(value: str, base: Path) -> Path:
    """Resolve value relative to base unless it is already absolute"""
    path = Path(value)
    return path if path.is_absolute() else base / path


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - dataInputdir: Base directory for table src paths
            - siteConfigFile: Resolved site config, if given
            - envOK: True if environment is valid

    Exits:
        1 if inputdir, inputFile or site config is missing, or if
        outputdir is the same directory as inputdir
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        sys.exit(1)

    if state.outputdir.resolve() == state.inputdir.resolve():
        print("Error: outputdir must differ from inputdir (sources would be overwritten)", file=sys.stderr)
        sys.exit(1)

    if state.inputFile:
        input_file = state.inputdir / state.inputFile
        if not input_file.resolve().is_relative_to(state.inputdir.resolve()):
            print(f"Error: Input file must be inside inputdir: {input_file}", file=sys.stderr)
            sys.exit(1)
        if not input_file.is_file():
            print(f"Error: Input file not found: {input_file}", file=sys.stderr)
            sys.exit(1)

    data_dir = state.dataDir or appsettings.default_data_dir
    state.dataInputdir = path_resolveAgainst(data_dir, state.inputdir)
    if not state.dataInputdir.is_dir():
        LOG(f"Data directory {state.dataInputdir} does not exist; table directives will fail", level=1)
    LOG(f"Data directory: {state.dataInputdir}", level=2)

    if state.siteConfig:
        state.siteConfigFile = path_resolveAgainst(state.siteConfig, state.inputdir)
        if not state.siteConfigFile.is_file():
            print(f"Error: Site config not found: {state.siteConfigFile}", file=sys.stderr)
            sys.exit(1)
        LOG(f"Site config: {state.siteConfigFile}", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def sources_find(inputstate: ProgramState) -> ProgramState:
    """
    Select the articles to expand.

    Returns:
        ProgramState with added field:
            - sourceFiles: Sorted list of article paths

    Exits:
        1 if no article matches
    """
    state = inputstate.copy()

    if state.inputFile:
        state.sourceFiles = [state.inputdir / state.inputFile]
    else:
        # outputdir may live under inputdir; never re-expand earlier outputs
        output_root = state.outputdir.resolve()
        state.sourceFiles = sorted(
            path for path in state.inputdir.glob(state.pattern)
            if path.is_file() and not path.resolve().is_relative_to(output_root)
        )

    if not state.sourceFiles:
        print(f"Error: No articles match '{state.pattern}' in {state.inputdir}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Found {len(state.sourceFiles)} article(s)", level=1)
    return state


def document_expand(expander: Expander, source_file: Path, inputdir: Path, outputdir: Path) -> Dict[str, Any]:
    """
    Expand one article and write it under outputdir.

    Failed articles are not written.

    Returns:
        Dict with input, output, status (bool) and error (None or the
        structured error dict)
    """
    output_file = outputdir / source_file.relative_to(inputdir)
    result: Dict[str, Any] = {
        "input": str(source_file),
        "output": str(output_file),
        "status": False,
        "error": None,
    }

    try:
        source = source_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        result["error"] = {"kind": "ReadError", "message": str(e)}
        return result

    try:
        expanded = expander.expand(source)
    except ExpansionError as e:
        result["error"] = e.asDict()
        return result

    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(expanded, encoding="utf-8")
    LOG(f"Wrote {output_file}", level=2)

    result["status"] = True
    return result


def sources_expand(inputstate: ProgramState) -> ProgramState:
    """
    Expand all selected articles, in parallel when --jobs > 1.

    Returns:
        ProgramState with added field:
            - expandResults: One result dict per article, in sourceFiles order

    Exits:
        1 if the site configuration cannot be loaded
    """
    state = inputstate.copy()

    try:
        site = (
            SiteConfig.config_load(state.siteConfigFile)
            if state.siteConfigFile
            else SiteConfig()
        )
    except SiteConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    expander = Expander(base_dir=state.dataInputdir, site=site)
    LOG("Expanding directives...", level=1)

    def job(source_file: Path) -> Dict[str, Any]:
        return document_expand(expander, source_file, state.inputdir, state.outputdir)

    if state.jobs > 1:
        with ThreadPoolExecutor(max_workers=state.jobs) as pool:
            # Each worker runs in a copy of this context so LOG keeps our verbosity
            futures = [
                pool.submit(contextvars.copy_context().run, job, source_file)
                for source_file in state.sourceFiles
            ]
            results: List[Dict[str, Any]] = [future.result() for future in futures]
    else:
        results = [job(source_file) for source_file in state.sourceFiles]

    state.expandResults = results
    return state


def error_format(error: Dict[str, Any]) -> str:
    """
    One-line description of a structured error

    Example:
        >>> error_format({"kind": "ArityError", "message": "bad", "directive": "subscribe",
        ...               "line": 3, "column": 1})
        "ArityError: bad [directive 'subscribe' at 3:1]"
    """
    where = []
    if error.get("directive"):
        where.append(f"directive '{error['directive']}'")
    if error.get("line") is not None:
        where.append(f"at {error['line']}:{error['column']}")
    if error.get("row") is not None:
        where.append(f"row {error['row']}")
    suffix = f" [{' '.join(where)}]" if where else ""
    return f"{error['kind']}: {error['message']}{suffix}"


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display expansion results.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if any article failed to expand
    """
    state: ProgramState = inputstate.copy()
    results = state.expandResults or []
    failures = [result for result in results if not result["status"]]

    for failure in failures:
        print(f"{failure['input']}: {error_format(failure['error'])}", file=sys.stderr)

    LOG(f"\n✓ Expanded {len(results) - len(failures)} of {len(results)} article(s)", level=1)
    LOG(f"  Output: {state.outputdir}", level=1)

    if failures:
        sys.exit(1)
    return state


def directives_print() -> None:
    """Print the directive table"""
    for spec in directive_registry.directives_list():
        print(f"{spec.name:<16} {spec.category.value:<6} {spec.arity_describe()}")
        print(f"{'':<16} {spec.description}")
        for example in spec.examples:
            print(f"{'':<16}   {example}")


@chris_plugin(
    parser=parser,
    title="shortdown - Directive expansion for markdown articles",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - expand directives in articles under inputdir.

    Orchestrates the pipeline:
        1. env_check: Validate paths and environment
        2. sources_find: Select articles
        3. sources_expand: Expand and write each article
        4. results_report: Report outcomes, exit 1 on any failure

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing article sources
        outputdir: Directory where expanded articles are written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    if options.listDirectives:
        directives_print()
        return

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, sources_find, sources_expand, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
