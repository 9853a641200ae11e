"""arauth -- Artifact Registry authentication for build repositories.

This package rewrites ``artifactregistry://`` repository URLs into HTTPS
URLs and attaches short-lived OAuth2 credentials so that a build can
download from (and publish to) a private Artifact Registry repository.

Typical workflow::

    arauth configure build.yaml       # apply plugins and show the result
    arauth rewrite-url artifactregistry://us-maven.pkg.dev/proj/repo

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and build file loading.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    rewrite: The ``artifactregistry://`` URL rewrite rule.
    auth: Credential providers and access-token acquisition.
    host: In-process build model with lifecycle callbacks.
    plugin: Plugin base class and the Artifact Registry plugin.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
