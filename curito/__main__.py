"""
CLI entry point, when used as a module: `python -m curito`.

Useful for debugging in the IDEs (use the start-mode "Module", module "curito").
"""
from curito import cli

if __name__ == '__main__':
    cli.main()
