# Copyright 2025 s3sftp contributors
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

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Config(BaseModel):
    # Bucket layout
    bucket: str
    prefix: str = ""  # Hard jail boundary inside the bucket
    home_path: str = ""  # Default directory for relative paths, under prefix

    # AWS Configuration
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None  # MinIO, LocalStack, etc.
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_session_token: Optional[str] = None

    # Server-side encryption with a managed key instead of AES256
    kms_key_id: Optional[str] = None

    # Access control
    blocked_download_addresses: List[str] = Field(default_factory=list)


def _split_addresses(raw: str) -> List[str]:
    return [address.strip() for address in raw.split(",") if address.strip()]


def load_config(env_file: Optional[str] = None) -> Config:
    """Load configuration from environment variables and .env file"""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    bucket = os.getenv("S3_BUCKET", "")
    if not bucket:
        raise ValueError(
            "S3_BUCKET environment variable is required. "
            "Please set it in your .env file or environment."
        )

    config_data = {
        "bucket": bucket,
        "prefix": os.getenv("S3_PREFIX", ""),
        "home_path": os.getenv("SFTP_HOME_PATH", ""),
        "region": os.getenv("AWS_REGION", "us-east-1"),
        "endpoint_url": os.getenv("AWS_ENDPOINT_URL") or None,
        "aws_access_key_id": os.getenv("AWS_ACCESS_KEY_ID") or None,
        "aws_secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY") or None,
        "aws_session_token": os.getenv("AWS_SESSION_TOKEN") or None,
        "kms_key_id": os.getenv("KMS_KEY_ID") or None,
        "blocked_download_addresses": _split_addresses(os.getenv("BLOCK_DOWNLOADS_IP_ADDRESSES", "")),
    }

    return Config(**config_data)
