# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# AGENT CONFIGURATION
# -----------------------------------------------------------------------------
# Everything the agent reads from its environment, resolved once at startup
# and passed down explicitly.
#
# Environment Variables:
# - SERF_USER_EVENT: Set by `serf agent -event-handler` for user events.
#   Non-empty selects the raw-line event source, otherwise Consul JSON.
# - AWS_CONFIG_FILE: AWS config file holding credentials and region.
#   Without it, s3:// locations are rejected.
# - AWS_DEFAULT_PROFILE: Profile inside that file (default: "default").
# -----------------------------------------------------------------------------

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import botocore.session
from botocore.exceptions import BotoCoreError

from stretcher.domain.errors import ConfigError

AWS_DEFAULT_PROFILE_NAME = "default"


@dataclass(frozen=True)
class AgentSettings:
    """Startup settings taken from the process environment."""

    serf_user_event: str = ""
    aws_config_file: str = ""
    aws_profile: str = AWS_DEFAULT_PROFILE_NAME

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AgentSettings":
        env = os.environ if environ is None else environ
        return cls(
            serf_user_event=env.get("SERF_USER_EVENT", ""),
            aws_config_file=env.get("AWS_CONFIG_FILE", ""),
            aws_profile=env.get("AWS_DEFAULT_PROFILE", "") or AWS_DEFAULT_PROFILE_NAME,
        )


@dataclass(frozen=True)
class AwsAuth:
    """Static AWS credentials and region used for s3:// fetches."""

    access_key: str = ""
    secret_key: str = ""
    region: str = ""

    def is_usable(self) -> bool:
        return bool(self.access_key) and bool(self.region)


def load_aws_config(path: str, profile: str = AWS_DEFAULT_PROFILE_NAME) -> AwsAuth:
    """
    Resolve credentials and region for one profile of an AWS config file.

    The file is read by botocore's own config loader: `[default]` or
    `[profile NAME]` sections with aws_access_key_id, aws_secret_access_key
    and region. No network call is made.

    Raises:
        ConfigError: If the file is missing or the profile is not defined.
    """
    config_path = Path(path).expanduser()
    if not config_path.is_file():
        raise ConfigError(f"Load AWS_CONFIG_FILE failed: no such file: {config_path}")

    session = botocore.session.Session()
    session.set_config_variable("config_file", str(config_path))
    # Only this file is consulted; keeps ~/.aws/credentials out of the merge
    session.set_config_variable("credentials_file", str(config_path))
    session.set_config_variable("profile", profile)

    try:
        scoped = session.get_scoped_config()
    except BotoCoreError as e:
        raise ConfigError(f"Load AWS_CONFIG_FILE failed: {e}") from e

    return AwsAuth(
        access_key=scoped.get("aws_access_key_id", ""),
        secret_key=scoped.get("aws_secret_access_key", ""),
        region=scoped.get("region", ""),
    )
