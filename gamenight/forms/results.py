from flask_wtf import FlaskForm
from wtforms import (
    HiddenField,
    SelectField,
    SelectMultipleField,
    SubmitField,
    TextAreaField,
    widgets,
)
from wtforms.validators import DataRequired, Length, Optional


def optional_int(value):
    """Coerce select values where "" means no choice"""
    if value in (None, "", "None"):
        return None
    return int(value)


class MultiCheckboxField(SelectMultipleField):
    widget = widgets.ListWidget(prefix_label=False)
    option_widget = widgets.CheckboxInput()


class SubmitResultForm(FlaskForm):
    # Picked with the game tabs on the page, so the versions below always match it
    game_id = HiddenField("Game", validators=[DataRequired()], filters=[optional_int])
    version_id = SelectField("Version", validators=[Optional()], coerce=optional_int)
    winner_id = SelectField("Winner", validators=[DataRequired()], coerce=int)
    participant_ids = MultiCheckboxField("Participants", coerce=int)
    notes = TextAreaField(
        "Notes (optional)",
        validators=[
            Length(max=1000, message="Notes cannot exceed 1000 characters")
        ],
    )
    submit = SubmitField("Save result")

    def set_choices(self, game, players):
        """Versions of the selected game only, and the roster for winner/participants"""
        versions = game.versions.all() if game is not None else []
        self.version_id.choices = [(None, "(No version)")] + [
            (version.id, version.name) for version in versions
        ]
        player_choices = [(player.id, player.full_name) for player in players]
        self.winner_id.choices = player_choices
        self.participant_ids.choices = player_choices
