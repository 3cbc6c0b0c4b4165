#!/usr/bin/env python3
"""
Installation demonstration script for soap-film-core.

This script verifies that the package can be imported and used correctly
after installation.
"""

def main():
    """Demonstrate successful package installation."""
    print("🚀 Soap Film Core - Installation Verification")
    print("=" * 50)

    try:
        # Test basic imports
        print("📦 Testing package imports...")
        from soap_film import (
            EPSILON,
            FilmConfig,
            FilmSession,
            FrameType,
            create_default_frame,
            sample_frame_boundary_local,
        )
        print("✅ All core functions imported successfully!")

        # Test constants
        print("\n🔧 Testing constants...")
        print(f"EPSILON: {EPSILON}")
        print(f"Frame types: {[frame_type.value for frame_type in FrameType]}")

        # Test utility functions
        print("\n📐 Testing frame sampling...")
        loop = sample_frame_boundary_local(create_default_frame("demo", FrameType.SQUARE), 16)
        print(f"Sampled square loop with {len(loop)} points")

        # Test class instantiation
        print("\n🏗️ Testing class instantiation...")
        session = FilmSession(FilmConfig())
        session.add_frame(FrameType.CIRCLE)
        session.add_frame(FrameType.CIRCLE)
        print(f"Film area after one tick: {session.tick(compute_area=True):.4f}")
        session.dispose()

        print("\n🎉 Package installation successful!")
        print("\n💡 Next steps:")
        print("1. Check the examples/ directory for usage examples")
        print("2. Read the README.md for detailed documentation")
        print("3. Run 'python examples/basic_usage.py' to watch a film relax")

    except ImportError as e:
        print(f"❌ Import error: {e}")
        print("\n🔧 Troubleshooting:")
        print("1. Make sure you're in the correct directory")
        print("2. Install the package: pip install -e .")
        print("3. Activate your virtual environment if using one")
        print("4. Check that all dependencies are installed")

    except Exception as e:
        print(f"❌ Unexpected error: {e}")
        print("Please check the error message and ensure proper installation.")

if __name__ == "__main__":
    main()
