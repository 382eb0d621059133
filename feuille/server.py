"""
Feuille - SCSS Language Server.

This module defines the language server and its LSP features: workspace
indexing on startup, settings updates and go-to-definition for variables,
mixins and functions.
"""

import asyncio
import logging
from typing import Optional

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from feuille.cache import SymbolCache
from feuille.features.definition import goto_definition as get_definition_location
from feuille.logger_setup import apply_log_settings, setup_logging
from feuille.scanner import scan_workspace
from feuille.settings import Settings

logger = logging.getLogger("feuille")


class ScssLanguageServer(LanguageServer):
    """Language server implementation for SCSS stylesheets."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cache = SymbolCache()
        self.settings = Settings()
        self.logger = setup_logging(self, self.settings)
        self.logger.info("SCSS Language Server starting...")

    def apply_settings(self, options) -> None:
        """Replace the current settings with a client payload."""
        self.settings = Settings.from_dict(options)
        apply_log_settings(self.logger, self.settings)
        self.logger.debug("Settings updated: %s", self.settings)

    def scan(self, root_path: Optional[str]) -> int:
        """Index the stylesheets of the workspace into the symbol cache."""
        if not root_path:
            self.logger.debug("No workspace root, skipping scan")
            return 0
        return scan_workspace(root_path, self.cache, self.settings)


server = ScssLanguageServer("feuille", "v0.1.0")


# -----------------------------------------------------------------------------
# Lifecycle Events
# -----------------------------------------------------------------------------


@server.feature(types.INITIALIZE)
def initialize(ls: ScssLanguageServer, params: types.InitializeParams) -> None:
    """Read the client settings sent with the initialize request."""
    ls.apply_settings(params.initialization_options)


@server.feature(types.INITIALIZED)
async def initialized(
    ls: ScssLanguageServer, params: types.InitializedParams
) -> None:
    """Index the workspace once the client is ready."""
    root_path = ls.workspace.root_path
    # Reading and parsing files must not block the event loop
    await asyncio.to_thread(ls.scan, root_path)


@server.feature(types.WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(
    ls: ScssLanguageServer, params: types.DidChangeConfigurationParams
) -> None:
    """Apply settings pushed by the client."""
    ls.apply_settings(params.settings)


# -----------------------------------------------------------------------------
# Navigation Features
# -----------------------------------------------------------------------------


@server.feature(types.TEXT_DOCUMENT_DEFINITION)
def goto_definition(
    ls: ScssLanguageServer, params: types.DefinitionParams
) -> Optional[types.Location]:
    """Jump to the declaration of the variable, mixin or function at the cursor."""
    ls.logger.debug("Definition requested: %s", params.text_document.uri)
    doc = ls.workspace.get_text_document(params.text_document.uri)
    offset = doc.offset_at_position(params.position)
    return get_definition_location(
        ls.workspace.root_path, doc, offset, ls.cache, ls.settings
    )
