"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

import dataclasses
from functools import reduce
from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the build pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the build progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, pattern, dataDir,
          siteConfig, jobs, listDirectives
        - env_check: dataInputdir, siteConfigFile, envOK
        - sources_find: sourceFiles
        - sources_expand: expandResults
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing article sources
        outputdir: Base output directory for expanded articles
        verbosity: Logging verbosity level (1-3)
        inputFile: Single source file (relative to inputdir), or "" for pattern mode
        pattern: Glob (relative to inputdir) selecting sources in pattern mode
        dataDir: Optional data directory for table src paths
        siteConfig: Optional site configuration YAML path
        jobs: Number of documents expanded in parallel
        listDirectives: Print the directive table and stop
        envOK: Environment validation passed
        dataInputdir: Resolved base directory for table src paths
        siteConfigFile: Resolved site configuration file, if any
        sourceFiles: Source files selected for expansion
        expandResults: Per-document outcomes (input, output, status, error)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    pattern: str = field(default="")
    dataDir: Optional[str] = field(default=None)
    siteConfig: Optional[str] = field(default=None)
    jobs: int = field(default=1)
    listDirectives: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    dataInputdir: Path = field(default=Path("/"))
    siteConfigFile: Optional[Path] = field(default=None)
    sourceFiles: List[Path] = field(default_factory=list)
    expandResults: Optional[List[Dict[str, Any]]] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the build pipeline.

        Args:
            options: Parsed CLI arguments (inputFile, dataDir, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for expanded output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        # Only keep options that are ProgramState fields
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            sources_find,
            sources_expand,
            results_report
        )

    This is equivalent to:
        results_report(sources_expand(sources_find(env_check(initial_state))))
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
