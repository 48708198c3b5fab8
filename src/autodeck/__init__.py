# AutoDeck: Auto DJ mixing automation engine
# Package: autodeck

__version__ = "1.0.0-dev"
__author__ = "AutoDeck Contributors"
__description__ = "Autonomous two-deck mixing automation with phrase-aligned transitions"

# Module structure:
#   - autodeck.mixing   : Styles, harmonic relation, smoothing, transition state machine
#   - autodeck.engine   : Tick scheduler, AutoDJEngine, real-time runner
#   - autodeck.deck     : Deck, knob, fader and crossfader model
#   - autodeck.library  : Track records from the track library
#   - autodeck.config   : Configuration management
#   - autodeck.cli      : Command-line interface
