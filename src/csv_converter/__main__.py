from csv_converter.cli.cli import app

if __name__ == "__main__":
    app()
