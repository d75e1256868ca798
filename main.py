#!/usr/bin/env python3
"""
MIDI Perform - Entry point.

Plays a MIDI controller as a computer keyboard.
"""

from midi_perform.cli import main

if __name__ == "__main__":
    main()
