from propspals import create_app, db
from propspals.models import Participant, Pick, Pool, Prop, RecoveryToken

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "Pool": Pool,
        "Participant": Participant,
        "Prop": Prop,
        "Pick": Pick,
        "RecoveryToken": RecoveryToken,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
