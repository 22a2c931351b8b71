"""
Attribute names and tuning constants for buildmanifest.

Centralizes attribute names so providers, tests and the CLI agree on
the exact spelling written into a manifest.
"""

from __future__ import annotations

# =============================================================================
# Main class
# =============================================================================

MAIN_CLASS = "Main-Class"

# =============================================================================
# Implementation attributes
# =============================================================================

IMPLEMENTATION_TITLE = "Implementation-Title"
IMPLEMENTATION_GROUP = "Implementation-Group"
IMPLEMENTATION_VERSION = "Implementation-Version"

# =============================================================================
# Build attributes
# =============================================================================

BUILT_BY = "Built-By"
BUILT_HOST = "Built-Host"
BUILT_DATE = "Built-Date"
BUILT_OS = "Built-OS"
BUILT_RUNTIME = "Built-Runtime"

# =============================================================================
# Source-control attributes
# =============================================================================

SCM_REPOSITORY = "SCM-Repository"
SCM_BRANCH = "SCM-Branch"
SCM_COMMIT_MESSAGE = "SCM-Commit-Message"
SCM_COMMIT_HASH = "SCM-Commit-Hash"
SCM_COMMIT_AUTHOR = "SCM-Commit-Author"
SCM_COMMIT_DATE = "SCM-Commit-Date"

# =============================================================================
# Classpath
# =============================================================================

CLASS_PATH = "Class-Path"

# =============================================================================
# Git
# =============================================================================

# Upper bound for a single git invocation (remote lookups may hit the network)
GIT_COMMAND_TIMEOUT_S = 5.0

# Remote whose URL is reported as SCM-Repository
GIT_REMOTE_NAME = "origin"

# =============================================================================
# Files
# =============================================================================

DEFAULT_OPTIONS_FILE = ".buildmanifest.yaml"
