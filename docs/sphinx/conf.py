# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for the sdlgen documentation."""

project = "sdlgen"
author = "sdlgen Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]
autodoc_typehints = "description"

html_theme = "alabaster"
