""" stand alone command line script for use with pyinstaller
    
    To build this into an executable:
    - install pyinstaller:
        python3 -m pip install pyinstaller
    - then execute the following command:
        pyinstaller --onefile --name iphoto2exif cli.py

    Resulting executable will be in "dist/iphoto2exif"

    Note: This is *not* the cli that "python3 -m pip install ." would install;
    it's merely a wrapper around __main__.py to allow pyinstaller to work
    
"""

from iphoto2exif.__main__ import main

if __name__ == "__main__":
    main()
