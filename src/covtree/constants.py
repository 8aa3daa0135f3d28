# Copyright 2026 Pennyworth Technologies, Inc.
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

"""Shared constants for covtree."""

# Name reported as the parent of a root node
ROOT_MARKER = "^"

# Coverage tools name the default (unnamed) package '-'
DEFAULT_PACKAGE_NAME = "-"

PATH_SEPARATOR = "/"
PACKAGE_SEPARATOR = "."

# Name of the group node created when modules with different names are combined
COMBINED_REPORT_NAME = "Combined Report"

# Bound for numerators and denominators of delta fractions (32-bit signed max)
DEFAULT_RATIONAL_LIMIT = 2**31 - 1

DEFAULT_LOCALE = "en_US"
DEFAULT_PERCENTAGE_PATTERN = "#,##0.00%"
NOT_AVAILABLE = "n/a"
