from .dsl import (
    StepBuilder,
    append,
    build,
    copy,
    create_file,
    delete,
    insert_after,
    insert_before,
    overwrite,
    recipe_of,
    say,
    sh,
    step,
    uncomment,
)
from .model import Command, CommitRecord, Mutation, ProjectTree, Say, Step
from .runner import Pipeline, PipelineError, StepError, StepRunner, build_pipeline, load_recipe

__all__ = [
    "step", "sh", "say", "insert_after", "insert_before", "append", "overwrite", "create_file",
    "delete", "copy", "uncomment", "StepBuilder", "build", "recipe_of",
    "Step", "Mutation", "Command", "Say", "CommitRecord", "ProjectTree",
    "Pipeline", "PipelineError", "StepError", "StepRunner", "build_pipeline", "load_recipe",
]
