# Path and File Name : /home/datastack/rebuild/datastack_installer/__main__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Allows `python -m datastack_installer` to run provisioning

import sys

from .installer import main

if __name__ == '__main__':
    sys.exit(main())
