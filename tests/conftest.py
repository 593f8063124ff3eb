# tests/conftest.py
import pytest

from dsptree.config import loader

SAMPLE_DSP = """# Microsoft Developer Studio Project File - Name="Sample" - Package Owner=<4>
# Microsoft Developer Studio Generated Build File, Format Version 6.00
# ** DO NOT EDIT **

# TARGTYPE "Win32 (x86) Application" 0x0101

!IF  "$(CFG)" == "Sample - Win32 Release"
# PROP Use_MFC 0
!ENDIF

# Begin Target

# Name "Sample - Win32 Release"
# Begin Group "Source Files"

# PROP Default_Filter "cpp;c;cxx;rc;def;r;odl;idl;hpj;bat"
# Begin Source File

SOURCE=.\\src\\main.cpp
# End Source File
# Begin Source File

SOURCE=.\\src\\util\\strings.cpp
# End Source File
# Begin Source File

SOURCE=.\\app.cpp
# End Source File
# End Group
# Begin Group "Header Files"

# PROP Default_Filter "h;hpp;hxx;hm;inl"
# Begin Source File

SOURCE=".\\include\\app.h"
# End Source File
# End Group
# Begin Source File

SOURCE=.\\loose.c
# End Source File
# Begin Source File

SOURCE=.\\res\\app.rc
# End Source File
# Begin Source File

SOURCE=.\\ReadMe.txt
# End Source File
# End Target
# End Project
"""

@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keeps config and logs out of the real user directory."""
    monkeypatch.setenv("DSPTREE_CONFIG_DIR", str(tmp_path_factory.mktemp("dsptree-config")))
    monkeypatch.delenv("DSPTREE_FILE_ENCODING", raising=False)
    loader.reset_config_cache()
    yield
    loader.reset_config_cache()

@pytest.fixture
def sample_dsp(tmp_path):
    dsp = tmp_path / "Sample.dsp"
    dsp.write_bytes(SAMPLE_DSP.replace("\n", "\r\n").encode("ascii"))
    return dsp
