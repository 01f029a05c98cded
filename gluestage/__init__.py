"""
gluestage - AWS Glue job staging and CloudFormation compilation

Reads the custom.Glue section of a serverless.yml service file, uploads job
scripts and support files to S3, and compiles jobs, triggers and buckets into
CloudFormation resources.
"""

__version__ = "0.1.0"


__all__ = ["GluePluginConfig", "load_config", "run_deploy", "CompiledTemplate"]

from .config import GluePluginConfig, load_config
from .deployer import run_deploy
from .template import CompiledTemplate
