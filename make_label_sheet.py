#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Lay out repeated labels on A4 sheets and export them as PDF or Word.
"""

import label_sheet_maker.cli


if __name__ == "__main__":
	label_sheet_maker.cli.main()
