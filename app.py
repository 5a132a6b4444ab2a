import sys

from streamlit.web import cli as stcli

from quiz_app.main import main


def run():
    """Console entry point: `quiz-app` launches `streamlit run` on this file."""
    sys.argv = ["streamlit", "run", __file__]
    sys.exit(stcli.main())


if __name__ == "__main__":
    main()
