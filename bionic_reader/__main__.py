"""Package entry point for ``python -m bionic_reader``.

WHY: Users run the reader as ``python -m bionic_reader chapter.txt`` for
CLI mode, or ``python -m bionic_reader --gui`` for the desktop reader.

HOW: Checks sys.argv for the ``--gui`` flag. If present, launches the
Tkinter GUI. Otherwise, delegates to the CLI's main() function.

RULES:
- ``--gui`` flag launches the Tkinter GUI
- Without ``--gui``, falls through to the CLI
"""

import sys

if __name__ == "__main__":
    if "--gui" in sys.argv:
        from bionic_reader.gui import main as gui_main
        gui_main()
    else:
        from bionic_reader.cli import main
        main()
