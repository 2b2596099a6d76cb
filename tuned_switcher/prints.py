from os import get_terminal_size, getenv
import sys

# colors only on a terminal, and never when NO_COLOR is set
COLOR = sys.stdout.isatty() and getenv("NO_COLOR") is None
try: terminal_width = min(get_terminal_size(0)[0], 50)
except OSError: terminal_width = 50

ACTIVE_COLOR = 10
ERROR_COLOR = 9
INFO_COLOR = 12

def colored(*values:str, color) -> str:
    return f'\x1b[38;5;{color}m{" ".join(values)}\x1b[0m' if COLOR and color else ' '.join(values)

def print_separator(color=None) -> None: print(colored('─'*terminal_width, color=color))

def print_header(*values:str, color=None) -> str:
    head = ' '.join(values)
    sep = '─'*max(((terminal_width - len(head)) // 2 - 1), 2)
    str = colored(f'{sep} {head} {sep}', color=color)
    print('\n'+str)
    return str

def print_colon(previous_value:str, *next_values:object, color=None) -> None: print(colored(previous_value, color=color)+':', *next_values)

def print_block(block_title:str, *lines:object, color=None) -> None:
    print_header(block_title, color=color)
    for line in lines: print(line)
    print_separator(color)

# "* name" for the active profile, "  name" for the others
def profile_line(label:str, active:bool) -> str: return colored('* '+label, color=ACTIVE_COLOR) if active else '  '+label

def print_error(*values:object) -> None: print_colon('Error', *values, color=ERROR_COLOR)

def print_info(*values:object) -> None: print_colon('Info', *values, color=INFO_COLOR)
