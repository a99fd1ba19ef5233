ARGS = {
    "debug": False,
    "verbose": False,
    "logfile": None,
}


def _log_message(prefix: str, message: str, max_len: int = 120):
    original_len = len(message)
    truncated = message[:max_len]
    log_line = f"{prefix} {original_len}] {truncated}"
    print(log_line)
    if ARGS["logfile"]:
        with open(ARGS["logfile"], "a") as f:
            f.write(log_line + "\n")


def debug_print(message: str):
    if ARGS["debug"]:
        _log_message("[DEBUG", message)


def verbose_print(message: str):
    if ARGS["verbose"]:
        _log_message("[VERBOSE", message)
