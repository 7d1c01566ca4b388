"""
CLI entry point, when used as a module: `python -m typedkube`.

Useful for debugging in the IDEs (use the start-mode "Module", module "typedkube").
"""
from typedkube import cli

if __name__ == '__main__':
    cli.main()
