"""swaggen -- Generate Python server and client code from Swagger 2.0 specs.

This package loads a Swagger 2.0 document, resolves its ``$ref`` pointers,
analyses its operations, media types, security schemes and definitions, and
renders Jinja2 templates against a generation-ready model to produce a
server scaffold or an API client.

Typical workflow::

    swaggen validate swagger.yml
    swaggen generate server swagger.yml --target ./out --name search

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Generation option loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    spec: Document loading, reference expansion and analysis.
    generator: Codegen model building, templates and file emission.
"""

__version__ = "0.3.0"
