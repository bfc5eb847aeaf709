from .cli import build_parser, load_target, main, parse_args

__all__ = ["build_parser", "load_target", "main", "parse_args"]
