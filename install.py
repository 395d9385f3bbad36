#!/usr/bin/env python3
"""
Voice-to-Robot Control Installation Script
Prepares local directories and configuration.
"""

import sys
import shutil
from pathlib import Path


def check_python_version():
    """Check if Python version is compatible."""
    if sys.version_info < (3, 11):
        print("❌ Python 3.11 or higher is required!")
        print(f"Current version: {sys.version}")
        return False
    print(f"✅ Python version: {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    return True


def setup_directories():
    """Create necessary directories."""
    print("📁 Setting up directories...")
    for directory in ["logs", "configs"]:
        Path(directory).mkdir(parents=True, exist_ok=True)
    print("✅ Directories created")


def create_env_file():
    """Create .env file from template if it doesn't exist."""
    if Path('.env').exists():
        print("✅ .env file already exists")
    elif Path('.env.template').exists():
        print("📝 Creating .env file from template...")
        shutil.copy('.env.template', '.env')
        print("✅ .env file created")
    else:
        print("⚠️  No .env template found - defaults will be used")


def check_optional_dependencies():
    """Report optional packages needed for local microphone mode."""
    print("🔍 Checking optional dependencies...")
    try:
        import pyaudio  # noqa: F401
        print("✅ PyAudio found - 'python main.py --listen' is available")
    except ImportError:
        print("⚠️  PyAudio not found: microphone mode disabled")
        print("   Install with: pip install -e .[mic]")


def main():
    """Main installation process."""
    print("🚀 Voice-to-Robot Control Installation")
    print("=" * 40)

    if not check_python_version():
        sys.exit(1)

    setup_directories()
    create_env_file()
    check_optional_dependencies()

    print("\n🎉 Installation complete!")
    print("\n📋 Next steps:")
    print("   1. pip install -e .")
    print("   2. Run: python main.py")
    print("   3. Open http://127.0.0.1:3000 and hold the button to talk")


if __name__ == "__main__":
    main()
