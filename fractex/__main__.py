from . import (
    ARGS,
    PROGRAM_VERSION,
    CompilerConfig,
    LexError,
    ParseError,
    TranslationError,
    build_fragment_shader,
    compile_equation,
    undeclared_variable,
)
import argparse
import sys


def declaration(text: str):
    name, _, value = text.partition("=")
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"invalid declaration {text!r}")
    if not value.strip():
        return name, None
    try:
        return name, float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid value for {name}: {value!r}")


def complex_value(text: str) -> complex:
    try:
        return complex(text.replace(" ", "").replace("i", "j"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid complex number {text!r}")


def main():
    parser = argparse.ArgumentParser(
        description="fractex equation compiler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  fractex "z^2 + c"
  fractex "\\sin(z) + k c" -d k=0.5 -S -O julia.frag
  fractex "z^3 + c" -E 1+2i 0.3+0.5i
  fractex -f equation.tex -DVL debug.log
        """,
    )

    parser.add_argument("equation", nargs="?", help="equation to compile")
    parser.add_argument(
        "-f", "--file", metavar="FILE", help="read the equation from FILE"
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"fractex {PROGRAM_VERSION}",
        help="prints the fractex version number and exits",
    )
    parser.add_argument(
        "-d",
        "--declare",
        action="append",
        type=declaration,
        default=[],
        metavar="NAME[=VALUE]",
        help="declare a scalar parameter, optionally with its value",
    )
    parser.add_argument(
        "-U",
        "--uniforms",
        action="store_true",
        help="keep declared parameters as uniforms instead of inlining values",
    )
    parser.add_argument(
        "-S",
        "--shader",
        action="store_true",
        help="emit a complete escape-time fragment shader",
    )
    parser.add_argument(
        "-I", "--iterations", type=int, default=300, help="shader iteration count"
    )
    parser.add_argument(
        "--cutoff", type=float, default=4.0, help="shader escape radius"
    )
    parser.add_argument(
        "-E",
        "--evaluate",
        nargs=2,
        type=complex_value,
        metavar=("Z", "C"),
        help="print the reference value of the equation at Z and C",
    )
    parser.add_argument(
        "-O",
        "--output",
        required=False,
        metavar="FILE",
        help="output to a file INSTEAD of printing",
    )
    parser.add_argument(
        "-P",
        "--print",
        action="store_true",
        help="print success messages (always on when --output is set)",
    )
    parser.add_argument(
        "-D", "--debug", action="store_true", help="enable debug output"
    )
    parser.add_argument(
        "-V", "--verbose", action="store_true", help="enable verbose output"
    )
    parser.add_argument(
        "-L", "--logfile", required=False, metavar="FILE", help="write logs to FILE"
    )
    args = parser.parse_args()
    for name in ARGS:
        if hasattr(args, name):
            ARGS[name] = getattr(args, name)

    if ARGS["logfile"]:
        with open(ARGS["logfile"], "w+") as f:
            f.write(f"fractex {PROGRAM_VERSION}\n")

    try:
        if args.file:
            with open(args.file) as f:
                source = f.read().strip()
        elif args.equation is not None:
            source = args.equation
        else:
            parser.error("no equation given (pass one or use --file)")

        if args.print or args.output:
            print(f"Compiling \033[33;1m{source}\033[0m")
            if ARGS["debug"]:
                print("\033[34;1m[Debug mode enabled]\033[0m")
            if ARGS["verbose"]:
                print("\033[34;1m[Verbose mode enabled]\033[0m")
            if ARGS["logfile"]:
                print(f"\033[34;1m[Logging to: {ARGS['logfile']}]\033[0m")

        config = CompilerConfig(
            variables=dict(args.declare), inline_variables=not args.uniforms
        )
        compiled = compile_equation(source, config)

        out = compiled.code
        if args.shader:
            out = build_fragment_shader(
                compiled.code, args.iterations, args.cutoff, config.uniforms
            )

        if args.evaluate:
            from .reference import evaluate

            z, c = args.evaluate
            values = {k: v for k, v in config.variables.items() if v is not None}
            result = evaluate(compiled.tree, z, c, values)
            print(f"\033[35;1mf({z}, {c}) = {result}\033[0m")

        if args.print or args.output:
            print("\033[32;1m=== Compilation successful! ===\033[0m")
            print(f"Generated \033[1m{len(compiled.code.splitlines())}\033[0m lines")

        if args.output:
            with open(args.output, "w+") as f:
                f.write(out + "\n")
            if args.print:
                print(f"Written to: \033[33;1m{args.output}\033[0m")
        else:
            print(out, flush=True)

    except FileNotFoundError:
        print(f"\033[31;1mError: file '{args.file}' not found\033[0m")
        sys.exit(1)
    except LexError as e:
        print(f"\033[31;1mLex error: {e}\033[0m")
        name = undeclared_variable(e)
        if name:
            print(f"hint: declare it with -d {name}=VALUE")
        sys.exit(1)
    except ParseError as e:
        print(f"\033[31;1mParse error: {e}\033[0m")
        sys.exit(1)
    except TranslationError as e:
        print(f"\033[31;1mTranslation error: {e}\033[0m")
        sys.exit(1)
    except ValueError as e:
        print(f"\033[31;1mShader error: {e}\033[0m")
        sys.exit(1)
    except Exception as e:
        print(f"\033[31;1mUnexpected error: {e}\033[0m")
        import traceback

        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
